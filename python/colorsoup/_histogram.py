"""Exact color histogram of the opaque pixels of an image."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ColorBucket:
    """One distinct opaque color and the number of pixels that have it."""

    r: int
    g: int
    b: int
    count: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


def unique_colors(image: Image.Image) -> list[ColorBucket]:
    """Count every distinct RGB triple among the opaque pixels of ``image``.

    Transparent pixels (alpha 0) are skipped. Buckets come back in the order
    their color was first seen.
    """
    if image.mode != "RGBA":
        raise ValueError(f"expected RGBA image, got {image.mode!r}")
    width, height = image.size
    pixels = image.load()
    counts: dict[tuple[int, int, int], int] = {}
    for y in range(height):
        for x in range(width):
            r, g, b, a = pixels[x, y]
            if a == 0:
                continue
            key = (r, g, b)
            counts[key] = counts.get(key, 0) + 1
    logger.debug("found %d unique opaque colors", len(counts))
    return [ColorBucket(r, g, b, count) for (r, g, b), count in counts.items()]

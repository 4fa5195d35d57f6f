"""Solid background detection and removal.

The background is the single connected region reachable from the four image
corners whose pixels are all light or all dark. It is removed by flood fill,
which makes every matching pixel fully transparent.
"""

from __future__ import annotations

import logging
from enum import Enum

from PIL import Image

logger = logging.getLogger(__name__)

Pixel = tuple[int, int, int, int]

# Transparent, with a magenta RGB so cleared areas stand out in debug snapshots.
MARKER: Pixel = (255, 0, 255, 0)


class BackgroundMask(Enum):
    """A background classification rule: all channels past a threshold."""

    LIGHT = 200
    DARK = 55

    @property
    def threshold(self) -> int:
        return self.value

    def is_ignorable(self, pixel: Pixel) -> bool:
        """Whether ``pixel`` belongs to a background of this kind.

        Transparent pixels are always ignorable.
        """
        r, g, b, a = pixel
        if a == 0:
            return True
        if self is BackgroundMask.DARK:
            return r <= self.threshold and g <= self.threshold and b <= self.threshold
        return r >= self.threshold and g >= self.threshold and b >= self.threshold


# Priority order used by select_mask.
DEFAULT_MASKS: tuple[BackgroundMask, ...] = (BackgroundMask.LIGHT, BackgroundMask.DARK)


def _check_dimensions(image: Image.Image) -> None:
    if image.mode != "RGBA":
        raise ValueError(f"expected RGBA image, got {image.mode!r}")
    width, height = image.size
    if width == 0 or height == 0:
        raise ValueError(f"image dimensions cannot be zero, got {width}x{height}")


def crop_center(image: Image.Image) -> Image.Image:
    """Return the central quadrant of ``image`` as a new image.

    Width and height are halved and the window is offset from the origin by
    a quarter of the new dimensions.
    """
    width, height = image.size
    new_width, new_height = width // 2, height // 2
    left, top = new_width // 4, new_height // 4
    return image.crop((left, top, left + new_width, top + new_height))


def corners(width: int, height: int) -> list[tuple[int, int]]:
    return [(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)]


def select_mask(image: Image.Image) -> BackgroundMask | None:
    """Pick the first mask under which all four corner pixels are ignorable."""
    width, height = image.size
    pixels = image.load()
    samples = [pixels[x, y] for x, y in corners(width, height)]
    logger.debug("corner pixels: %s", samples)
    for mask in DEFAULT_MASKS:
        if all(mask.is_ignorable(p) for p in samples):
            return mask
    return None


def flood_fill(image: Image.Image, mask: BackgroundMask) -> int:
    """Clear every pixel reachable from a corner through ignorable pixels.

    Works in place on ``image`` and returns the number of pixels cleared.
    """
    width, height = image.size
    pixels = image.load()
    stack = corners(width, height)
    cleared = 0
    while stack:
        x, y = stack.pop()
        px = pixels[x, y]
        if px[3] == 0 or not mask.is_ignorable(px):
            continue
        pixels[x, y] = MARKER
        cleared += 1
        if x > 0 and pixels[x - 1, y][3] != 0:
            stack.append((x - 1, y))
        if x < width - 1 and pixels[x + 1, y][3] != 0:
            stack.append((x + 1, y))
        if y > 0 and pixels[x, y - 1][3] != 0:
            stack.append((x, y - 1))
        if y < height - 1 and pixels[x, y + 1][3] != 0:
            stack.append((x, y + 1))
    return cleared


def remove_background(
    image: Image.Image, crop: bool = False
) -> tuple[Image.Image, BackgroundMask | None, int]:
    """Crop (optionally), detect the background and flood fill it away.

    Returns the processed image, the selected mask (``None`` when no
    background was detected) and the number of pixels cleared. Without
    ``crop`` the input image itself is modified.

    Raises:
        ValueError: If the image is not RGBA or has a zero dimension, before
            or after cropping.
    """
    _check_dimensions(image)
    if crop:
        image = crop_center(image)
        _check_dimensions(image)

    logger.debug("bounds: %dx%d", *image.size)
    mask = select_mask(image)
    if mask is None:
        logger.debug("no background mask matched the corners")
        return image, None, 0

    logger.debug("masking image using %s", mask)
    cleared = flood_fill(image, mask)
    logger.debug("cleared %d background pixels", cleared)
    return image, mask, cleared

"""`colorsoup` finds the dominant colors of an image.

A solid light or dark background touching all four corners is removed first,
then the remaining opaque colors are clustered with K-means and ranked by how
many pixels each cluster covers.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Self, overload

from PIL import Image

from colorsoup._background import BackgroundMask, remove_background
from colorsoup._histogram import ColorBucket, unique_colors
from colorsoup._imaging import decode, encode, save_snapshot
from colorsoup._kmeans import (
    DEFAULT_MAX_ITERATIONS,
    Aggregation,
    Centroid,
    kmeans,
    kmeans_with_iterations,
)
from colorsoup._render import render
from colorsoup.errors import (
    ColorSoupError,
    ConfigurationError,
    EmptyPaletteError,
    ImageDecodeError,
    InsufficientColorsError,
    NonConvergenceError,
    WriteColorError,
)

__all__ = [
    "extract_dominant_colors",
    "RGB",
    "DominantColor",
    "DebugInfo",
    "BackgroundMask",
    "ColorBucket",
    "unique_colors",
    "remove_background",
    "kmeans",
    "decode",
    "encode",
    "render",
    "ColorSoupError",
    "ConfigurationError",
    "ImageDecodeError",
    "EmptyPaletteError",
    "InsufficientColorsError",
    "NonConvergenceError",
    "WriteColorError",
    "DEFAULT_MAX_ITERATIONS",
]


@dataclass(frozen=True, slots=True)
class RGB:
    """An sRGB color with red, green, and blue components in the [0, 255] range."""

    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True, slots=True)
class DominantColor:
    """A cluster color and the number of pixels assigned to it.

    Attributes:
        rgb: The cluster representative.
        count: Total pixel count of the distinct colors in the cluster.
    """

    rgb: RGB
    count: int

    @property
    def hex(self) -> str:
        return self.rgb.hex

    @classmethod
    def _from_centroid(cls, c: Centroid) -> Self:
        return cls(rgb=RGB(c.r, c.g, c.b), count=c.count)


@dataclass(frozen=True, slots=True)
class DebugInfo:
    """Debug info returned by ``extract_dominant_colors()`` with ``with_debug=True``.

    Attributes:
        mask: ``"light"`` or ``"dark"`` when a background was removed, ``None``
            when the corners did not agree on one.
        cleared_pixels: How many pixels the background flood fill made transparent.
        unique_colors: Number of distinct opaque colors that were clustered.
        kmeans_iterations: Lloyd passes run before the assignment stopped changing.
        image_size: ``(width, height)`` of the image after the optional crop.
    """

    mask: Literal["light", "dark"] | None
    cleared_pixels: int
    unique_colors: int
    kmeans_iterations: int
    image_size: tuple[int, int]


@overload
def extract_dominant_colors(
    image: Image.Image,
    k: int = ...,
    *,
    aggregation: Aggregation = ...,
    crop: bool = ...,
    max_iterations: int = ...,
    rng: random.Random | None = ...,
    debug_dir: str | Path | None = ...,
    with_debug: Literal[True],
) -> tuple[list[DominantColor], DebugInfo]: ...


@overload
def extract_dominant_colors(
    image: Image.Image,
    k: int = ...,
    *,
    aggregation: Aggregation = ...,
    crop: bool = ...,
    max_iterations: int = ...,
    rng: random.Random | None = ...,
    debug_dir: str | Path | None = ...,
    with_debug: Literal[False] = ...,
) -> list[DominantColor]: ...


def extract_dominant_colors(
    image: Image.Image,
    k: int = 3,
    *,
    aggregation: Aggregation = "median",
    crop: bool = False,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng: random.Random | None = None,
    debug_dir: str | Path | None = None,
    with_debug: bool = False,
) -> list[DominantColor] | tuple[list[DominantColor], DebugInfo]:
    """Extract the ``k`` dominant colors from a PIL image.

    The image must be in RGBA mode; other modes raise ``ValueError``. Without
    ``crop`` the background is cleared in ``image`` itself, so pass a copy if
    the original pixels are still needed.

    Returns exactly ``k`` colors sorted by dominance (the largest pixel count
    first).

    Args:
        image: A PIL image in RGBA mode.
        k: Number of colors to return.
        aggregation: How a cluster's color is derived from its members:
            ``"median"`` takes the per-channel median, ``"mean"`` the
            per-channel integer mean.
        crop: Keep only the central part of the image before looking for a
            background, for images with the subject in the middle.
        max_iterations: Maximum number of k-means passes.
        rng: Random generator for k-means++ seeding. Pass a seeded
            ``random.Random`` for reproducible results.
        debug_dir: When set, a PNG snapshot of the image after background
            removal is saved in this directory. A failed save is logged and
            otherwise ignored.
        with_debug: If ``True``, return a ``(colors, debug_info)`` tuple instead
            of just the color list.

    Raises:
        ValueError: If the image is not RGBA, has a zero dimension, or a
            parameter is out of range.
        EmptyPaletteError: If no opaque pixels remain after background removal.
        InsufficientColorsError: If fewer than ``k`` distinct colors remain.
        NonConvergenceError: If k-means does not settle within ``max_iterations``.
    """
    processed, mask, cleared = remove_background(image, crop=crop)
    if debug_dir is not None:
        save_snapshot(processed, debug_dir)
    buckets = unique_colors(processed)
    centroids, iterations = kmeans_with_iterations(
        buckets, k, aggregation=aggregation, max_iterations=max_iterations, rng=rng
    )
    color_list = [DominantColor._from_centroid(c) for c in centroids]
    if with_debug:
        debug = DebugInfo(
            mask=mask.name.lower() if mask is not None else None,
            cleared_pixels=cleared,
            unique_colors=len(buckets),
            kmeans_iterations=iterations,
            image_size=processed.size,
        )
        return color_list, debug
    return color_list

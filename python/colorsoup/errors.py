"""Exceptions raised by colorsoup."""

from __future__ import annotations


class ColorSoupError(Exception):
    """Base exception for all colorsoup failures."""


class ConfigurationError(ColorSoupError, ValueError):
    """An option could not be parsed or is out of range."""


class ImageDecodeError(ColorSoupError):
    """The image path does not exist or its format is not supported."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"image error: cannot open {path!r}: {reason}")
        self.path = path


class EmptyPaletteError(ColorSoupError):
    """No opaque pixels are left to cluster."""

    def __init__(self) -> None:
        super().__init__("couldn't find any colors, all pixels are transparent")


class InsufficientColorsError(ColorSoupError):
    """More clusters were requested than there are distinct colors."""

    def __init__(self, k: int, found: int) -> None:
        super().__init__(f"k={k} while only {found} colors were found in the image")
        self.k = k
        self.found = found


class NonConvergenceError(ColorSoupError):
    """K-means still reassigned buckets on its last permitted iteration."""

    def __init__(self, max_iterations: int) -> None:
        super().__init__(f"k-means max iterations limit of {max_iterations} reached")
        self.max_iterations = max_iterations


class WriteColorError(ColorSoupError):
    """Rendered colors could not be written to the output stream."""

"""Terminal swatches using 24-bit ANSI colors."""

from __future__ import annotations

SWATCH_WIDTH = 6

_RESET = "\x1b[0m"


def render(color_hex: str, rgb: tuple[int, int, int]) -> bytes:
    """A colored block followed by ``color_hex``, as one encoded line."""
    r, g, b = rgb
    swatch = f"\x1b[48;2;{r};{g};{b}m{' ' * SWATCH_WIDTH}{_RESET}"
    return f"{swatch} {color_hex}\n".encode()

"""Command-line interface for colorsoup."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from typing import BinaryIO

from colorsoup import DominantColor, extract_dominant_colors
from colorsoup._imaging import decode
from colorsoup._render import render
from colorsoup.config import DEFAULT_K, ExtractionConfig
from colorsoup.errors import ColorSoupError, WriteColorError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="colorsoup",
        description="Find the most dominant colors in an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  colorsoup photo.jpg
  colorsoup -k 5 --mean logo.png

  # Product shot with the subject in the middle, keep the masked image
  colorsoup --crop --debug product.jpg
        """,
    )

    parser.add_argument("image_path", help="Path to image file")

    # Kept as a string so a bad value is reported as a configuration error.
    parser.add_argument(
        "-k",
        default=str(DEFAULT_K),
        help=f"Number of centroids (default: {DEFAULT_K})",
    )

    parser.add_argument(
        "-m",
        "--mean",
        action="store_true",
        help="Calculate using mean instead of median",
    )

    parser.add_argument(
        "-c",
        "--crop",
        action="store_true",
        help="Crop image borders by 25%% (for images with object at center)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Save processed image to the ./.tmp/ directory",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    return parser


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a CLI run."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    # Pillow logs every plugin it tries at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)


def write_colors(colors: Iterable[DominantColor], out: BinaryIO) -> None:
    """Write one rendered swatch line per color to ``out``."""
    try:
        for color in colors:
            out.write(render(color.hex, color.rgb.as_tuple()))
        out.flush()
    except OSError as e:
        raise WriteColorError(f"write color error: {e}") from e


def run(config: ExtractionConfig, out: BinaryIO) -> None:
    image = decode(config.image_path)
    logger.debug("decoded %s: %dx%d", config.image_path, *image.size)
    colors, debug = extract_dominant_colors(
        image,
        config.k,
        aggregation=config.aggregation,
        crop=config.crop,
        max_iterations=config.max_iterations,
        debug_dir=config.debug_dir if config.debug else None,
        with_debug=True,
    )
    if config.debug:
        logger.info("background mask: %s", debug.mask or "none")
    logger.debug(
        "%d unique colors, k-means settled after %d iterations",
        debug.unique_colors,
        debug.kmeans_iterations,
    )
    write_colors(colors, out)


def main(args: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)
    setup_logging(verbose=parsed.verbose, quiet=parsed.quiet)

    try:
        config = ExtractionConfig.from_args(parsed)
        run(config, sys.stdout.buffer)
    except ColorSoupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

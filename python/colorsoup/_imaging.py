"""Reading images from disk and saving debug snapshots."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from colorsoup.errors import ImageDecodeError

logger = logging.getLogger(__name__)

DEFAULT_DEBUG_DIR = ".tmp"


def decode(path: str | Path) -> Image.Image:
    """Open ``path`` with Pillow and return it as an RGBA image.

    Raises:
        ImageDecodeError: If the file is missing, unreadable or not an image
            format Pillow understands.
    """
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except FileNotFoundError:
        raise ImageDecodeError(str(path), "no such file") from None
    except UnidentifiedImageError:
        raise ImageDecodeError(str(path), "unsupported image format") from None
    except OSError as e:
        raise ImageDecodeError(str(path), str(e)) from e


def encode(image: Image.Image, directory: str | Path = DEFAULT_DEBUG_DIR) -> Path:
    """Save ``image`` as ``<directory>/tmp_<unix millis>.png`` and return the path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"tmp_{time.time_ns() // 1_000_000}.png"
    image.save(path)
    return path


def save_snapshot(image: Image.Image, directory: str | Path = DEFAULT_DEBUG_DIR) -> Path | None:
    """Like :func:`encode`, but a failure is logged instead of raised."""
    try:
        path = encode(image, directory)
    except (OSError, ValueError) as e:
        logger.warning("could not save debug snapshot to %s: %s", directory, e)
        return None
    logger.info("saved debug snapshot: %s", path)
    return path

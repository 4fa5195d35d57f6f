"""Run configuration for the colorsoup command-line tool."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from colorsoup._imaging import DEFAULT_DEBUG_DIR
from colorsoup._kmeans import DEFAULT_MAX_ITERATIONS, Aggregation
from colorsoup.errors import ConfigurationError

DEFAULT_K = 3


def parse_k(value: str) -> int:
    """Parse a centroid count, raising ``ConfigurationError`` on bad input."""
    try:
        k = int(value)
    except ValueError:
        raise ConfigurationError(f"K error: invalid number of centroids {value!r}") from None
    if k < 1:
        raise ConfigurationError(f"K error: number of centroids must be >= 1, got {k}")
    return k


@dataclass
class ExtractionConfig:
    """Options for one dominant color extraction run."""

    image_path: str
    k: int = DEFAULT_K
    aggregation: Aggregation = "median"
    crop: bool = False
    debug: bool = False
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    debug_dir: str = DEFAULT_DEBUG_DIR

    def __post_init__(self) -> None:
        if self.k < 1:
            raise ConfigurationError(f"K error: number of centroids must be >= 1, got {self.k}")
        if self.aggregation not in ("mean", "median"):
            raise ConfigurationError(
                f"aggregation must be 'mean' or 'median', got {self.aggregation!r}"
            )
        if self.max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be >= 1, got {self.max_iterations}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> ExtractionConfig:
        return cls(
            image_path=args.image_path,
            k=parse_k(args.k),
            aggregation="mean" if args.mean else "median",
            crop=args.crop,
            debug=args.debug,
        )

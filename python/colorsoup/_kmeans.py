"""K-means clustering of a color histogram.

Seeds are picked with K-means++ and refined with Lloyd's algorithm. Every
bucket is one sample: pixel counts only feed the centroid counts used to rank
the result, never the distances or the seed probabilities.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from colorsoup._histogram import ColorBucket
from colorsoup.errors import EmptyPaletteError, InsufficientColorsError, NonConvergenceError

logger = logging.getLogger(__name__)

Aggregation = Literal["mean", "median"]

DEFAULT_MAX_ITERATIONS = 1000


@dataclass(slots=True)
class Centroid:
    """A cluster representative; ``count`` is the pixel total of its members."""

    r: int
    g: int
    b: int
    count: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


def distance(a: ColorBucket | Centroid, b: ColorBucket | Centroid) -> int:
    """Squared euclidean distance in RGB space."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return dr * dr + dg * dg + db * db


def closest_centroid(bucket: ColorBucket, centroids: Sequence[Centroid]) -> int:
    """Index of the nearest centroid; ties go to the lowest index."""
    index = 0
    min_distance = distance(centroids[0], bucket)
    for i in range(1, len(centroids)):
        d = distance(centroids[i], bucket)
        if d < min_distance:
            min_distance = d
            index = i
    return index


def _weighted_index(rng: random.Random, weights: list[int]) -> int:
    total = sum(weights)
    draw = rng.random() * total
    cumulative = 0
    for i, w in enumerate(weights):
        cumulative += w
        if cumulative > draw:
            return i
    # Rounding left the walk short of the draw.
    return max((i for i, w in enumerate(weights) if w > 0), default=len(weights) - 1)


def seed_centroids(buckets: Sequence[ColorBucket], k: int, rng: random.Random) -> list[Centroid]:
    """Pick ``k`` initial centroids among ``buckets`` with K-means++."""
    first = buckets[rng.randrange(len(buckets))]
    seeds = [Centroid(first.r, first.g, first.b, first.count)]
    for _ in range(1, k):
        weights = [min(distance(seed, bucket) for seed in seeds) for bucket in buckets]
        chosen = buckets[_weighted_index(rng, weights)]
        seeds.append(Centroid(chosen.r, chosen.g, chosen.b, chosen.count))
    return seeds


def _mean(members: list[ColorBucket]) -> tuple[int, int, int]:
    n = len(members)
    return (
        sum(c.r for c in members) // n,
        sum(c.g for c in members) // n,
        sum(c.b for c in members) // n,
    )


def _median(members: list[ColorBucket]) -> tuple[int, int, int]:
    # Channels are picked independently, so the result need not be a member color.
    mid = len(members) // 2
    return (
        sorted(c.r for c in members)[mid],
        sorted(c.g for c in members)[mid],
        sorted(c.b for c in members)[mid],
    )


def update_centroid(centroid: Centroid, members: list[ColorBucket], aggregation: Aggregation) -> None:
    """Move ``centroid`` to the aggregate of ``members``.

    An empty group drops to a count of zero. In median mode it is also reset
    to black; in mean mode it keeps its color.
    """
    centroid.count = sum(c.count for c in members)
    if not members:
        if aggregation == "median":
            centroid.r, centroid.g, centroid.b = 0, 0, 0
        return
    if aggregation == "mean":
        centroid.r, centroid.g, centroid.b = _mean(members)
    else:
        centroid.r, centroid.g, centroid.b = _median(members)


def assign(buckets: Sequence[ColorBucket], centroids: Sequence[Centroid]) -> list[int]:
    """Nearest-centroid index for every bucket."""
    return [closest_centroid(bucket, centroids) for bucket in buckets]


def check_palette(buckets: Sequence[ColorBucket], k: int) -> None:
    """Raise if ``buckets`` cannot be split into ``k`` clusters."""
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if not buckets:
        raise EmptyPaletteError()
    if len(buckets) < k:
        raise InsufficientColorsError(k, len(buckets))


def kmeans_with_iterations(
    buckets: Sequence[ColorBucket],
    k: int,
    aggregation: Aggregation = "median",
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng: random.Random | None = None,
) -> tuple[list[Centroid], int]:
    """Like :func:`kmeans`, also returning the number of passes run."""
    check_palette(buckets, k)
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
    if aggregation not in ("mean", "median"):
        raise ValueError(f"aggregation must be 'mean' or 'median', got {aggregation!r}")
    if rng is None:
        rng = random.Random()

    centroids = seed_centroids(buckets, k, rng)
    logger.debug("seeds: %s", [c.rgb for c in centroids])

    groups: list[list[ColorBucket]] = [[] for _ in range(k)]
    assignment = [0] * len(buckets)
    for iteration in range(1, max_iterations + 1):
        for group in groups:
            group.clear()
        nearest = assign(buckets, centroids)
        for bucket, closest in zip(buckets, nearest):
            groups[closest].append(bucket)
        changed = nearest != assignment
        assignment = nearest

        if changed and iteration == max_iterations:
            raise NonConvergenceError(max_iterations)

        previous = [c.rgb for c in centroids]
        for centroid, members in zip(centroids, groups):
            update_centroid(centroid, members, aggregation)

        # A reset empty group moves its centroid, so confirm with another pass.
        if not changed and [c.rgb for c in centroids] == previous:
            break

    logger.debug("k-means converged after %d iterations", iteration)
    # sorted() is stable with reverse=True, equal counts keep their order.
    return sorted(centroids, key=lambda c: c.count, reverse=True), iteration


def kmeans(
    buckets: Sequence[ColorBucket],
    k: int,
    aggregation: Aggregation = "median",
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng: random.Random | None = None,
) -> list[Centroid]:
    """Cluster ``buckets`` into ``k`` centroids ordered by pixel count.

    Args:
        buckets: Distinct colors with their pixel counts.
        k: Number of clusters, between 1 and ``len(buckets)``.
        aggregation: ``"median"`` takes the per-channel median of each group,
            ``"mean"`` the per-channel integer mean.
        max_iterations: Limit on Lloyd passes.
        rng: Random generator used for seeding. A fresh unseeded one is used
            when omitted.

    Returns:
        ``k`` centroids, the largest pixel count first.

    Raises:
        EmptyPaletteError: If there are no buckets.
        InsufficientColorsError: If there are fewer buckets than ``k``.
        NonConvergenceError: If buckets still move on the last permitted pass.
        ValueError: If ``k``, ``max_iterations`` or ``aggregation`` is invalid.
    """
    centroids, _ = kmeans_with_iterations(buckets, k, aggregation, max_iterations, rng)
    return centroids

import random

import pytest

from colorsoup._histogram import ColorBucket
from colorsoup._kmeans import (
    Centroid,
    _weighted_index,
    assign,
    closest_centroid,
    kmeans,
    kmeans_with_iterations,
    seed_centroids,
    update_centroid,
)
from colorsoup.errors import EmptyPaletteError, InsufficientColorsError, NonConvergenceError


class UnusableRandom(random.Random):
    def random(self):
        raise AssertionError("random generator should not be used")

    def randrange(self, *args, **kwargs):
        raise AssertionError("random generator should not be used")


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def gray(v: int, count: int = 1) -> ColorBucket:
    return ColorBucket(v, v, v, count)


def three_clusters() -> list[ColorBucket]:
    return [
        ColorBucket(250, 0, 0, 40),
        ColorBucket(240, 10, 5, 20),
        ColorBucket(0, 250, 0, 5),
        ColorBucket(10, 240, 10, 3),
        ColorBucket(0, 0, 250, 10),
        ColorBucket(5, 5, 245, 12),
    ]


def test_mean_of_single_cluster() -> None:
    buckets = [gray(0, 5), gray(10), gray(100)]
    (centroid,) = kmeans(buckets, 1, aggregation="mean", rng=random.Random(1))
    assert centroid.rgb == (36, 36, 36)
    assert centroid.count == 7


def test_median_of_single_cluster() -> None:
    buckets = [gray(0, 5), gray(10), gray(100)]
    (centroid,) = kmeans(buckets, 1, aggregation="median", rng=random.Random(1))
    assert centroid.rgb == (10, 10, 10)
    assert centroid.count == 7


def test_median_takes_upper_middle() -> None:
    centroid = Centroid(0, 0, 0, 0)
    update_centroid(centroid, [gray(30), gray(0), gray(20), gray(10)], "median")
    assert centroid.rgb == (20, 20, 20)


def test_median_channels_are_independent() -> None:
    centroid = Centroid(0, 0, 0, 0)
    members = [ColorBucket(0, 100, 50, 1), ColorBucket(100, 0, 0, 1), ColorBucket(50, 50, 100, 1)]
    update_centroid(centroid, members, "median")
    assert centroid.rgb == (50, 50, 50)
    assert centroid.rgb not in [m.rgb for m in members]


def test_mean_uses_integer_division() -> None:
    centroid = Centroid(0, 0, 0, 0)
    update_centroid(centroid, [ColorBucket(1, 2, 255, 9), ColorBucket(2, 2, 254, 1)], "mean")
    assert centroid.rgb == (1, 2, 254)
    assert centroid.count == 10


def test_empty_group_keeps_color_in_mean_mode() -> None:
    centroid = Centroid(12, 34, 56, 99)
    update_centroid(centroid, [], "mean")
    assert centroid.rgb == (12, 34, 56)
    assert centroid.count == 0


def test_empty_group_resets_to_black_in_median_mode() -> None:
    centroid = Centroid(12, 34, 56, 99)
    update_centroid(centroid, [], "median")
    assert centroid.rgb == (0, 0, 0)
    assert centroid.count == 0


def test_median_cluster_emptied_during_refinement() -> None:
    buckets = [
        ColorBucket(0, 64, 128, 1),
        ColorBucket(0, 128, 32, 1),
        ColorBucket(64, 64, 160, 1),
        ColorBucket(0, 224, 192, 1),
        ColorBucket(160, 224, 32, 1),
        ColorBucket(128, 192, 96, 1),
    ]
    centroids = kmeans(buckets, 4, aggregation="median", rng=random.Random(541))
    assert [(c.rgb, c.count) for c in centroids] == [
        ((0, 128, 128), 3),
        ((160, 224, 96), 2),
        ((64, 64, 160), 1),
        ((0, 0, 0), 0),
    ]


def test_empty_palette_raises() -> None:
    with pytest.raises(EmptyPaletteError):
        kmeans([], 1)


def test_insufficient_colors_raises_before_seeding() -> None:
    with pytest.raises(InsufficientColorsError, match="k=3") as excinfo:
        kmeans([gray(0), gray(255)], 3, rng=UnusableRandom())
    assert excinfo.value.k == 3
    assert excinfo.value.found == 2


def test_invalid_arguments_raise() -> None:
    with pytest.raises(ValueError):
        kmeans([gray(0)], 0)
    with pytest.raises(ValueError):
        kmeans([gray(0)], 1, max_iterations=0)
    with pytest.raises(ValueError):
        kmeans([gray(0)], 1, aggregation="mode")


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("aggregation", ["mean", "median"])
def test_returns_exactly_k(seed: int, aggregation: str) -> None:
    rng = random.Random(seed)
    colors = {(rng.randrange(256), rng.randrange(256), rng.randrange(256)) for _ in range(40)}
    buckets = [ColorBucket(r, g, b, rng.randrange(1, 50)) for r, g, b in colors]
    for k in range(1, 8):
        centroids = kmeans(buckets, k, aggregation=aggregation, rng=random.Random(seed))
        assert len(centroids) == k
        assert sum(c.count for c in centroids) == sum(b.count for b in buckets)


def test_k_equals_number_of_colors() -> None:
    buckets = [gray(0, 3), gray(128, 7), gray(255, 5)]
    centroids = kmeans(buckets, 3, rng=random.Random(4))
    assert [(c.rgb, c.count) for c in centroids] == [
        ((128, 128, 128), 7),
        ((255, 255, 255), 5),
        ((0, 0, 0), 3),
    ]


def test_sorted_by_descending_count() -> None:
    centroids = kmeans(three_clusters(), 3, aggregation="mean", rng=random.Random(7))
    assert [c.count for c in centroids] == [60, 22, 8]
    assert centroids[0].rgb == (245, 5, 2)


def test_same_seed_same_result() -> None:
    buckets = [gray(v) for v in range(0, 256, 5)]
    first = kmeans(buckets, 4, rng=random.Random(42))
    second = kmeans(buckets, 4, rng=random.Random(42))
    assert first == second


def test_converged_centroids_are_a_fixed_point() -> None:
    centroids = kmeans(three_clusters(), 3, aggregation="mean", rng=random.Random(3))
    as_buckets = [ColorBucket(c.r, c.g, c.b, c.count) for c in centroids]
    assert assign(as_buckets, centroids) == [0, 1, 2]

    again = kmeans(as_buckets, 3, aggregation="mean", rng=random.Random(9))
    assert sorted((c.rgb, c.count) for c in again) == sorted((c.rgb, c.count) for c in centroids)


def test_non_convergence_raises() -> None:
    # With two seeds one bucket always moves out of the initial group on the first pass.
    with pytest.raises(NonConvergenceError, match="1 reached") as excinfo:
        kmeans([gray(0), gray(255)], 2, max_iterations=1, rng=random.Random(0))
    assert excinfo.value.max_iterations == 1


def test_single_pass_is_enough_for_one_cluster() -> None:
    centroids, iterations = kmeans_with_iterations([gray(0), gray(255)], 1, max_iterations=1)
    assert iterations == 1
    assert centroids[0].count == 2


def test_converges_with_confirming_pass() -> None:
    _, iterations = kmeans_with_iterations(three_clusters(), 3, rng=random.Random(5))
    assert iterations >= 2


def test_closest_centroid_tie_goes_to_first() -> None:
    centroids = [Centroid(0, 0, 0, 0), Centroid(20, 20, 20, 0)]
    assert closest_centroid(gray(10), centroids) == 0
    assert closest_centroid(gray(11), centroids) == 1


def test_seeds_are_distinct_buckets() -> None:
    buckets = [gray(v) for v in range(0, 256, 15)]
    seeds = seed_centroids(buckets, len(buckets), random.Random(11))
    assert len({s.rgb for s in seeds}) == len(buckets)


def test_seeding_ignores_pixel_counts() -> None:
    # The heavy bucket lies next to the first seed, so its weight stays tiny.
    buckets = [gray(0, 1), gray(1, 1_000_000), gray(255, 1)]
    rng = FixedRandom(0.99)
    rng.randrange = lambda n: 0
    seeds = seed_centroids(buckets, 2, rng)
    assert seeds[1].rgb == (255, 255, 255)


def test_weighted_index_walks_cumulative_sum() -> None:
    weights = [1, 0, 3]
    assert _weighted_index(FixedRandom(0.0), weights) == 0
    assert _weighted_index(FixedRandom(0.3), weights) == 2


def test_weighted_index_falls_back_to_last_positive_weight() -> None:
    # A draw equal to the total is never exceeded by the running sum.
    assert _weighted_index(FixedRandom(1.0), [2, 5, 0]) == 1

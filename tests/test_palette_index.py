import math

import numpy as np
import pytest

from panel_quant.palette_data import DEFAULT_CONFIG
from panel_quant.palette_index import KdTree, PaletteIndex, PaletteIndexError


def _euclid(a, b):
    return math.dist(a, b)


def test_nearest_small_palette(small_palette):
    index = PaletteIndex(small_palette)
    assert index.nearest([10, 10, 10]) == (0, 0, 0)
    assert index.nearest([250, 5, 5]) == (255, 0, 0)
    assert index.nearest([240, 240, 240]) == (255, 255, 255)


@pytest.mark.parametrize("search", ["kdtree", "linear"])
def test_nearest_is_palette_member(search, rng):
    index = PaletteIndex(DEFAULT_CONFIG.palette, search=search)
    members = set(DEFAULT_CONFIG.palette)
    for rgb in rng.integers(0, 256, size=(300, 3)):
        assert index.nearest(rgb) in members


@pytest.mark.parametrize("search", ["kdtree", "linear"])
def test_nearest_idempotent_on_members(search):
    index = PaletteIndex(DEFAULT_CONFIG.palette, search=search)
    for rgb in DEFAULT_CONFIG.palette:
        assert index.nearest(rgb) == rgb


def test_duplicates_preserved():
    index = PaletteIndex(DEFAULT_CONFIG.palette)
    assert len(index) == 18
    assert index.palette[0] == index.palette[1] == (0, 0, 0)
    assert index.resolve(0) == index.resolve(1)
    # either black slot is an acceptable answer
    assert index.nearest_index([0, 0, 0]) in (0, 1)


def test_linear_ties_take_lowest_index():
    index = PaletteIndex(DEFAULT_CONFIG.palette, search="linear")
    assert index.nearest_index([0, 0, 0]) == 0


def test_nearest_many_matches_single(rng):
    index = PaletteIndex(DEFAULT_CONFIG.palette)
    rows = rng.integers(0, 256, size=(50, 3), dtype=np.uint8)
    out = index.nearest_many(rows)
    assert out.dtype == np.uint8
    assert out.shape == (50, 3)
    for row, mapped in zip(rows, out):
        assert tuple(int(v) for v in mapped) == index.nearest(row)


def test_nearest_many_empty():
    index = PaletteIndex([(0, 0, 0)])
    assert index.nearest_many(np.zeros((0, 3), dtype=np.uint8)).shape == (0, 3)


def test_single_entry_palette_always_wins(rng):
    index = PaletteIndex([(12, 34, 56)])
    for rgb in rng.integers(0, 256, size=(20, 3)):
        assert index.nearest(rgb) == (12, 34, 56)


def test_resolve_unknown_identifier_raises():
    index = PaletteIndex([(0, 0, 0), (255, 255, 255)])
    with pytest.raises(PaletteIndexError):
        index.resolve(2)
    assert issubclass(PaletteIndexError, RuntimeError)


def test_index_lab_is_read_only():
    index = PaletteIndex([(0, 0, 0)])
    with pytest.raises(ValueError):
        index.lab[0, 0] = 5.0


@pytest.mark.parametrize(
    "palette",
    [[], [(0, 0)], [(0, 0, 256)], [(-1, 0, 0)]],
)
def test_bad_palette_rejected(palette):
    with pytest.raises(ValueError):
        PaletteIndex(palette)


def test_unknown_search_rejected():
    with pytest.raises(ValueError):
        PaletteIndex([(0, 0, 0)], search="octree")


def test_kdtree_exact_under_euclidean(rng):
    # with a true metric the single-axis bound is a lower bound, so the
    # tree must agree with brute force
    points = rng.uniform(-100, 100, size=(40, 3))
    tree = KdTree(points, list(range(40)))
    assert len(tree) == 40
    for q in rng.uniform(-120, 120, size=(100, 3)):
        dist, item = tree.nearest_one(q, distance=_euclid)
        brute = min(range(40), key=lambda i: _euclid(q, points[i]))
        assert dist == pytest.approx(_euclid(q, points[brute]))
        assert item == brute


def test_kdtree_duplicate_points():
    points = np.array([[1.0, 1.0, 1.0]] * 3 + [[5.0, 5.0, 5.0]])
    tree = KdTree(points, [10, 11, 12, 13])
    dist, item = tree.nearest_one([1.0, 1.0, 1.0], distance=_euclid)
    assert dist == 0.0
    assert item in (10, 11, 12)
    assert tree.nearest_one([5.0, 5.0, 5.0], distance=_euclid) == (0.0, 13)


def test_kdtree_rejects_mismatched_items():
    with pytest.raises(ValueError):
        KdTree(np.zeros((2, 3)), [0])

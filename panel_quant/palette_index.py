from __future__ import annotations

"""
Perceptual palette index.

Exports:
  KdTree                         3-D k-d tree over Lab points, one point per node
  PaletteIndex(palette, search)  nearest palette entry under CIEDE2000
  PaletteIndexError              internal lookup failure (programmer error)

Notes:
  The tree prunes a far branch when the single-axis difference to the split
  plane exceeds the best CIEDE2000 distance found so far. CIEDE2000 is not
  bounded below by that difference everywhere, so a search can in rare cases
  skip the true nearest entry. search="linear" scans every entry instead.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .colour_convert import axis_distance, delta_e2000_pair, rgb_to_lab
from .core_types import Lab, RGBTuple, U8Image, coerce_to_rgb_tuple

PointDistance = Callable[[Sequence[float], Sequence[float]], float]
AxisDistance = Callable[[float, float], float]


class PaletteIndexError(RuntimeError):
    """A search produced an identifier that was never inserted."""


@dataclass
class _Node:
    point: Tuple[float, float, float]
    item: int
    axis: int
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None


class KdTree:
    """
    Static 3-D k-d tree. Points with coord < split go left, >= split go right;
    queries descend by the same rule.
    """

    def __init__(self, points: np.ndarray, items: Sequence[int]) -> None:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] != len(items):
            raise ValueError("points and items must have the same length")
        rows = [
            (tuple(float(v) for v in pts[i]), int(items[i]))
            for i in range(pts.shape[0])
        ]
        self._size = len(rows)
        self._root = self._build(rows, depth=0)

    def __len__(self) -> int:
        return self._size

    @classmethod
    def _build(
        cls, rows: List[Tuple[Tuple[float, float, float], int]], depth: int
    ) -> Optional[_Node]:
        if not rows:
            return None
        axis = depth % 3
        # stable sort keeps insertion order among equal coords
        rows = sorted(rows, key=lambda r: r[0][axis])
        mid = len(rows) // 2
        # step back so every point left of the split is strictly below it
        while mid > 0 and rows[mid - 1][0][axis] == rows[mid][0][axis]:
            mid -= 1
        point, item = rows[mid]
        return _Node(
            point=point,
            item=item,
            axis=axis,
            left=cls._build(rows[:mid], depth + 1),
            right=cls._build(rows[mid + 1 :], depth + 1),
        )

    def nearest_one(
        self,
        query: Sequence[float],
        distance: PointDistance = delta_e2000_pair,
        bound: AxisDistance = axis_distance,
    ) -> Tuple[float, int]:
        """
        Return (distance, item) of the nearest point found.
        Ties keep the first point visited.
        """
        if self._root is None:
            raise ValueError("nearest_one on an empty tree")
        q = (float(query[0]), float(query[1]), float(query[2]))
        best_dist = float("inf")
        best_item = -1
        # (node, plane gap on the way down); the gap is rechecked on pop
        stack: List[Tuple[_Node, float]] = [(self._root, 0.0)]
        while stack:
            node, gap = stack.pop()
            if gap > best_dist:
                continue
            d = distance(q, node.point)
            if d < best_dist:
                best_dist, best_item = d, node.item
            split = node.point[node.axis]
            if q[node.axis] < split:
                near, far = node.left, node.right
            else:
                near, far = node.right, node.left
            # far is pushed first so near is searched first
            if far is not None:
                stack.append((far, bound(q[node.axis], split)))
            if near is not None:
                stack.append((near, 0.0))
        return best_dist, best_item


class PaletteIndex:
    """
    Read-only nearest-colour index over a fixed palette.

    Identifiers are palette positions; duplicates keep their own identifier.
    search: "kdtree" (default) or "linear".
    """

    def __init__(
        self, palette: Sequence[Sequence[int]], *, search: str = "kdtree"
    ) -> None:
        if search not in ("kdtree", "linear"):
            raise ValueError(f"unknown search {search!r}")
        entries = tuple(coerce_to_rgb_tuple(c) for c in palette)
        if not entries:
            raise ValueError("palette must contain at least one colour")

        self._search = search
        self._palette: Tuple[RGBTuple, ...] = entries
        self._lab: Lab = rgb_to_lab(np.array(entries, dtype=np.uint8)).reshape(-1, 3)
        self._lab.setflags(write=False)
        self._tree = KdTree(self._lab, list(range(len(entries))))
        self._rgb_of: Dict[int, RGBTuple] = dict(enumerate(entries))

    def __len__(self) -> int:
        return len(self._palette)

    @property
    def palette(self) -> Tuple[RGBTuple, ...]:
        return self._palette

    @property
    def lab(self) -> Lab:
        return self._lab

    @property
    def search(self) -> str:
        return self._search

    # queries

    def nearest_index_lab(self, lab: Sequence[float]) -> int:
        """Identifier of the nearest entry for a Lab coordinate."""
        if self._search == "linear":
            return self._nearest_linear(lab)
        _dist, item = self._tree.nearest_one(lab)
        return item

    def nearest_index(self, rgb: Sequence[int]) -> int:
        row = np.array([coerce_to_rgb_tuple(rgb)], dtype=np.uint8)
        return self.nearest_index_lab(rgb_to_lab(row)[0].astype(np.float64))

    def nearest(self, rgb: Sequence[int]) -> RGBTuple:
        """Nearest palette colour for one RGB triple."""
        return self.resolve(self.nearest_index(rgb))

    def nearest_many(self, rgb_rows: U8Image) -> U8Image:
        """
        Nearest palette colour for each row of a uint8 [N,3] array.
        Returns uint8 [N,3].
        """
        rows = np.asarray(rgb_rows, dtype=np.uint8).reshape(-1, 3)
        out = np.empty_like(rows)
        if rows.shape[0] == 0:
            return out
        labs = rgb_to_lab(rows).astype(np.float64)
        for i in range(rows.shape[0]):
            out[i] = self.resolve(self.nearest_index_lab(labs[i]))
        return out

    def resolve(self, ident: int) -> RGBTuple:
        """Map an identifier back to its RGB entry."""
        try:
            return self._rgb_of[ident]
        except KeyError:
            raise PaletteIndexError(
                f"identifier {ident} not present in palette index"
            ) from None

    def _nearest_linear(self, lab: Sequence[float]) -> int:
        best_dist = float("inf")
        best_item = -1
        for i in range(self._lab.shape[0]):
            d = delta_e2000_pair(lab, self._lab[i])
            if d < best_dist:
                best_dist, best_item = d, i
        return best_item


__all__ = ["KdTree", "PaletteIndex", "PaletteIndexError"]

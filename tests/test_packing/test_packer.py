"""Tests for the growing rectangle packer."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from spritely.errors import PackingError
from spritely.packing import GrowingPacker, PackNode, pack


@dataclass
class Box:
    width: int
    height: int
    name: str = ""
    x: int = -1
    y: int = -1


def _overlaps(a: Box, b: Box) -> bool:
    return a.x < b.x + b.width and b.x < a.x + a.width and a.y < b.y + b.height and b.y < a.y + a.height


# ---------------------------------------------------------------------------
# fit
# ---------------------------------------------------------------------------


class TestFit:
    def test_empty(self):
        packer = GrowingPacker()
        assert packer.fit([]) == []
        assert (packer.width, packer.height) == (0, 0)

    def test_single_item(self):
        box = Box(20, 10)
        packer = pack([box])
        assert (box.x, box.y) == (0, 0)
        assert (packer.width, packer.height) == (20, 10)

    def test_two_squares_grow_right(self):
        a, b = Box(16, 16, "a"), Box(16, 16, "b")
        packer = pack([a, b])
        assert (packer.width, packer.height) == (32, 16)
        assert (a.x, a.y) == (0, 0)
        assert (b.x, b.y) == (16, 0)

    def test_largest_area_first(self):
        small, large = Box(4, 4, "small"), Box(10, 10, "large")
        ordered = GrowingPacker().fit([small, large])
        assert [box.name for box in ordered] == ["large", "small"]
        assert (large.x, large.y) == (0, 0)

    def test_equal_areas_keep_input_order(self):
        boxes = [Box(8, 2, "wide"), Box(2, 8, "tall"), Box(4, 4, "square")]
        ordered = GrowingPacker().fit(boxes)
        assert [box.name for box in ordered] == ["wide", "tall", "square"]

    def test_item_lands_in_leftover_space(self):
        big, small = Box(20, 20), Box(5, 5)
        packer = pack([big, Box(20, 10), small])
        assert (packer.width, packer.height) == (40, 20)
        assert (small.x, small.y) == (20, 10)

    def test_mixed_set_never_overlaps(self):
        boxes = [Box(w, h) for w, h in [(30, 10), (12, 12), (5, 40), (16, 16), (16, 16), (3, 3), (25, 7), (9, 9)]]
        packer = pack(boxes)
        for i, a in enumerate(boxes):
            assert a.x >= 0 and a.y >= 0
            assert a.x + a.width <= packer.width
            assert a.y + a.height <= packer.height
            for b in boxes[i + 1:]:
                assert not _overlaps(a, b)

    def test_fit_resets_previous_state(self):
        packer = GrowingPacker()
        packer.fit([Box(50, 50)])
        packer.fit([Box(5, 5)])
        assert (packer.width, packer.height) == (5, 5)


# ---------------------------------------------------------------------------
# find / grow
# ---------------------------------------------------------------------------


class TestFind:
    def _arena(self, right: tuple[int, int], down: tuple[int, int]) -> GrowingPacker:
        packer = GrowingPacker()
        packer.nodes = [
            PackNode(0, 0, 20, 20, used=True, right=1, down=2),
            PackNode(10, 0, *right),
            PackNode(0, 10, *down),
        ]
        packer.root = 0
        return packer

    def test_smallest_fitting_node_wins(self):
        packer = self._arena(right=(10, 10), down=(5, 5))
        assert packer.find(4, 4) == 2

    def test_only_fitting_node(self):
        packer = self._arena(right=(10, 10), down=(5, 5))
        assert packer.find(8, 8) == 1

    def test_tie_prefers_right_strip(self):
        packer = self._arena(right=(5, 5), down=(5, 5))
        assert packer.find(5, 5) == 1

    def test_nothing_fits(self):
        packer = self._arena(right=(5, 5), down=(5, 5))
        assert packer.find(6, 6) is None


class TestGrow:
    def test_too_large_in_both_directions(self):
        packer = GrowingPacker()
        packer.fit([Box(10, 10)])
        with pytest.raises(PackingError):
            packer.grow(20, 20)

    def test_grows_down_when_wide(self):
        packer = GrowingPacker()
        packer.fit([Box(40, 10)])
        packer.grow(40, 10)
        assert (packer.width, packer.height) == (40, 20)

    def test_grows_right_when_tall(self):
        packer = GrowingPacker()
        packer.fit([Box(10, 40)])
        packer.grow(10, 40)
        assert (packer.width, packer.height) == (20, 40)

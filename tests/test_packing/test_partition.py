"""Tests for size-bounded batching."""

from __future__ import annotations

from pathlib import Path

from spritely.model import ImageGroup, ImageInfo, Placement
from spritely.packing import is_placed, partition

KB = 1024


def _group(name: str, size: int, width: int = 10, height: int = 10) -> ImageGroup:
    path = Path(f"/img/{name}.png")
    info = ImageInfo(path=path, width=width, height=height, size=size)
    return ImageGroup(path=path, url=f"{name}.png", info=info, width=width, height=height)


def _names(batches):
    return [[group.url[:-4] for group in batch] for batch in batches]


# ---------------------------------------------------------------------------
# partition
# ---------------------------------------------------------------------------


class TestPartition:
    def test_empty(self):
        result = partition([], budget=64 * KB)
        assert result.batches == []
        assert result.placed == []

    def test_no_budget_is_one_batch_in_order(self):
        groups = [_group("a", 10), _group("b", 900 * KB), _group("c", 5)]
        result = partition(groups, budget=0)
        assert _names(result.batches) == [["a", "b", "c"]]

    def test_greedy_fill_largest_first(self):
        groups = [_group("small", 20 * KB), _group("big", 40 * KB), _group("mid", 30 * KB)]
        result = partition(groups, budget=64 * KB)
        assert _names(result.batches) == [["big"], ["mid", "small"]]

    def test_three_equal_images_over_budget(self):
        groups = [_group(name, 40 * KB) for name in "abc"]
        result = partition(groups, budget=64 * KB)
        assert _names(result.batches) == [["a"], ["b"], ["c"]]

    def test_oversized_group_gets_its_own_batch(self):
        groups = [_group("huge", 200 * KB), _group("tiny", 1 * KB)]
        result = partition(groups, budget=64 * KB)
        assert _names(result.batches) == [["huge"], ["tiny"]]

    def test_batches_respect_budget(self):
        sizes = [5, 17, 33, 2, 60, 12, 41, 8, 29, 3]
        groups = [_group(f"g{i}", size * KB) for i, size in enumerate(sizes)]
        result = partition(groups, budget=64 * KB)
        assert sum(len(batch) for batch in result.batches) == len(groups)
        for batch in result.batches:
            assert len(batch) == 1 or sum(g.size for g in batch) <= 64 * KB

    def test_placed_groups_bypass_packing(self):
        done = _group("done", 10 * KB)
        done.info.placement = Placement(sheet="sprite_0.png", url="sprite_0.png", x=0, y=0, width=10, height=10)
        fresh = _group("fresh", 10 * KB)
        result = partition([done, fresh], budget=0)
        assert result.placed == [done]
        assert _names(result.batches) == [["fresh"]]


class TestIsPlaced:
    def test_unplaced(self):
        assert is_placed(_group("a", 1)) is False

    def test_without_info(self):
        assert is_placed(ImageGroup(path=Path("/x.png"), url="x.png")) is False

    def test_placement_too_small_for_margin(self):
        group = _group("a", 1, width=14, height=14)
        group.info.placement = Placement(sheet="s.png", url="s.png", x=0, y=0, width=10, height=10)
        assert is_placed(group) is False

    def test_placement_large_enough(self):
        group = _group("a", 1, width=10, height=10)
        group.info.placement = Placement(sheet="s.png", url="s.png", x=0, y=0, width=12, height=12)
        assert is_placed(group) is True

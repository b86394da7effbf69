"""Growing binary-tree rectangle packer.

The bin starts at the size of the largest item and grows right or down,
whichever keeps it closer to square, whenever nothing fits.  Nodes live
in a flat arena and reference their children by index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeVar

from spritely.errors import PackingError


class Packable(Protocol):
    width: int
    height: int
    x: int
    y: int


T = TypeVar("T", bound=Packable)


@dataclass
class PackNode:
    x: int
    y: int
    width: int
    height: int
    used: bool = False
    right: int | None = None  # strip beside the placed item
    down: int | None = None  # strip below the placed item

    def fits(self, width: int, height: int) -> bool:
        return not self.used and width <= self.width and height <= self.height


class GrowingPacker:
    """Assign non-overlapping ``x``/``y`` offsets to items, growing the bin as needed."""

    def __init__(self) -> None:
        self.nodes: list[PackNode] = []
        self.root: int | None = None

    @property
    def width(self) -> int:
        return self.nodes[self.root].width if self.root is not None else 0

    @property
    def height(self) -> int:
        return self.nodes[self.root].height if self.root is not None else 0

    def fit(self, items: list[T]) -> list[T]:
        """Place every item and return them in placement order (largest area first).

        The sort is stable, so equal areas keep their input order.
        """
        ordered = sorted(items, key=lambda item: item.width * item.height, reverse=True)
        self.nodes = []
        self.root = None
        if not ordered:
            return ordered

        first = ordered[0]
        self.root = self._new(PackNode(0, 0, first.width, first.height))
        for item in ordered:
            index = self.find(item.width, item.height)
            if index is None:
                index = self.grow(item.width, item.height)
            node = self.split(index, item.width, item.height)
            item.x, item.y = node.x, node.y
        return ordered

    def find(self, width: int, height: int) -> int | None:
        """Index of the smallest free node that can hold the item, or None.

        Nodes are visited depth first, right strip before down strip; the
        first of several equally small candidates wins.
        """
        best: int | None = None
        best_area = 0
        stack = [self.root] if self.root is not None else []
        while stack:
            index = stack.pop()
            node = self.nodes[index]
            if node.used:
                for child in (node.down, node.right):
                    if child is not None:
                        stack.append(child)
            elif node.fits(width, height):
                area = node.width * node.height
                if best is None or area < best_area:
                    best, best_area = index, area
        return best

    def split(self, index: int, width: int, height: int) -> PackNode:
        """Occupy node *index* with a width x height item and carve off the remainders."""
        node = self.nodes[index]
        node.used = True
        node.down = self._new(PackNode(node.x, node.y + height, node.width, node.height - height))
        node.right = self._new(PackNode(node.x + width, node.y, node.width - width, height))
        return node

    def grow(self, width: int, height: int) -> int:
        """Grow the bin for a width x height item and return the node that now fits it."""
        root = self.nodes[self.root]
        can_grow_down = width <= root.width
        can_grow_right = height <= root.height

        should_grow_right = can_grow_right and root.height >= root.width + width
        should_grow_down = can_grow_down and root.width >= root.height + height

        if should_grow_right or (can_grow_right and not should_grow_down):
            self._grow_right(width)
        elif can_grow_down:
            self._grow_down(height)
        else:
            raise PackingError(
                f"Cannot grow a {root.width}x{root.height} bin for a {width}x{height} item"
            )

        index = self.find(width, height)
        if index is None:
            raise PackingError(f"No room for a {width}x{height} item after growing")
        return index

    def _grow_right(self, width: int) -> None:
        old = self.nodes[self.root]
        strip = self._new(PackNode(old.width, 0, width, old.height))
        self.root = self._new(
            PackNode(0, 0, old.width + width, old.height, used=True, right=strip, down=self.root)
        )

    def _grow_down(self, height: int) -> None:
        old = self.nodes[self.root]
        strip = self._new(PackNode(0, old.height, old.width, height))
        self.root = self._new(
            PackNode(0, 0, old.width, old.height + height, used=True, right=self.root, down=strip)
        )

    def _new(self, node: PackNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1


def pack(batch: list[T]) -> GrowingPacker:
    """Pack *batch* in place and return the packer holding the final extent."""
    packer = GrowingPacker()
    packer.fit(batch)
    return packer

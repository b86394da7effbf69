"""Image metadata and image groups: the units the packer places."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from spritely.css.declarations import DeclarationBlock


@dataclass
class Placement:
    """Where an image was drawn: sheet and top-left corner."""

    sheet: str  # sheet file name
    url: str  # sheet url relative to the stylesheet output directory
    x: int
    y: int
    width: int
    height: int


@dataclass
class ImageInfo:
    """Decoded image, shared by every group referencing the same file in a run."""

    path: Path
    width: int
    height: int
    size: int  # encoded byte size in the output format
    fingerprint: str = ""
    image: Any = None  # PIL.Image.Image in RGBA mode
    placement: Placement | None = None

    @property
    def placed(self) -> bool:
        return self.placement is not None


@dataclass
class BlockRef:
    """A declaration block owned by a group, with what is needed to undo or rewrite it."""

    block: DeclarationBlock
    snapshot: str  # block text before collection touched it


@dataclass
class ImageGroup:
    """Every declaration block, across stylesheets, that uses one image file."""

    path: Path
    url: str  # as written in the stylesheet
    blocks: list[BlockRef] = field(default_factory=list)
    info: ImageInfo | None = None
    width: int = 0  # effective placement size, margin included
    height: int = 0
    x: int = 0
    y: int = 0
    sheet_index: int | None = None

    @property
    def size(self) -> int:
        return self.info.size if self.info else 0

    def restore(self) -> None:
        """Put every owning block back the way it was written."""
        for ref in self.blocks:
            ref.block.restore(ref.snapshot)


class ImageGroups:
    """Ordered registry of image groups keyed by resolved path."""

    def __init__(self) -> None:
        self._groups: dict[Path, ImageGroup] = {}

    def add(self, path: Path, url: str, ref: BlockRef) -> ImageGroup:
        """Attach *ref* to the group for *path*, creating it on first use."""
        group = self._groups.get(path)
        if group is None:
            group = ImageGroup(path=path, url=url)
            self._groups[path] = group
        group.blocks.append(ref)
        return group

    def get(self, path: Path) -> ImageGroup | None:
        return self._groups.get(path)

    def discard(self, path: Path) -> ImageGroup | None:
        return self._groups.pop(path, None)

    def __iter__(self):
        return iter(list(self._groups.values()))

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, path: object) -> bool:
        return path in self._groups

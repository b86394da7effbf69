"""Sheets and stylesheet units."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from spritely.css.tree import SheetNode
from spritely.model.image import ImageGroup, ImageGroups


@dataclass
class Sheet:
    """One output composite image."""

    index: int
    name: str  # <prefix><index>.<format>
    url: str  # relative to the stylesheet output directory
    groups: list[ImageGroup] = field(default_factory=list)
    width: int = 0
    height: int = 0


@dataclass
class StylesheetUnit:
    """One output stylesheet and the parsed sources feeding it."""

    output: Path
    sources: list[SheetNode] = field(default_factory=list)
    groups: ImageGroups = field(default_factory=ImageGroups)
    sheets: list[Sheet] = field(default_factory=list)

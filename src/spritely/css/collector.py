"""Collect the declaration blocks whose background image can be merged.

The visitor walks a ``SheetNode`` tree (following imported sheets and
grouping rules) and files every eligible block under the image it uses.
Eligibility checks run in a fixed order and the first failing one wins:

1. a ``background-size`` means the image is stretched;
2. the ``background`` shorthand is split into longhands;
3. ``right``/``center``/``bottom`` positions are computed by the browser, and
   any offset other than 0 would show neighbouring images on the sheet;
4. an explicit ``repeat``/``repeat-x``/``repeat-y`` tiles the image;
5. the image must be a single local file of an accepted format that exists.

A rejected block that was split is restored to its original text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from spritely.css.background import POSITION_X, POSITION_Y, split, split_position
from spritely.css.declarations import DeclarationBlock
from spritely.css.tree import DeclarationNode, GroupNode, ImportNode, Node, SheetNode, is_network_url
from spritely.model.image import BlockRef, ImageGroups

logger = logging.getLogger(__name__)

__all__ = ["Eligible", "collect", "evaluate", "image_url", "pixel_offset", "position_axes"]

_IGNORE_POSITION = re.compile(r"right|center|bottom", re.IGNORECASE)
_IGNORE_REPEAT = {"repeat", "repeat-x", "repeat-y"}
_IMAGE_RE = re.compile(
    r"""url\(\s*['"]?(?P<url>[^'"?#)]+?\.(?P<ext>[a-z0-9]+))(?P<query>[?#][^'")]*)?['"]?\s*\)""",
    re.IGNORECASE,
)
_PX_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+))(px)?$", re.IGNORECASE)


@dataclass
class Eligible:
    path: Path
    url: str
    ref: BlockRef


def collect(sheet: SheetNode, formats: tuple[str, ...] = ("png",), groups: ImageGroups | None = None) -> ImageGroups:
    """Gather the mergeable blocks of *sheet* into *groups* and return it.

    Passing the same *groups* for several sheets shares image groups between
    them, which is how combined output is built.
    """
    if groups is None:
        groups = ImageGroups()
    _visit(sheet.nodes, sheet.directory, formats, groups)
    return groups


def _visit(nodes: list[Node], directory: Path, formats: tuple[str, ...], groups: ImageGroups) -> None:
    for node in nodes:
        if isinstance(node, ImportNode):
            if node.sheet is not None:
                _visit(node.sheet.nodes, node.sheet.directory, formats, groups)
        elif isinstance(node, GroupNode):
            _visit(node.children, directory, formats, groups)
        elif isinstance(node, DeclarationNode):
            found = evaluate(node.block, directory, formats)
            if found is not None:
                groups.add(found.path, found.url, found.ref)


def evaluate(block: DeclarationBlock, directory: Path, formats: tuple[str, ...] = ("png",)) -> Eligible | None:
    """Decide whether *block* can use a sprite; None when it can not.

    An eligible block is left split (longhands plus position axes), ready
    for the rewriter.
    """
    if block.get("background-size"):
        return None

    snapshot = block.snapshot()
    was_split = split(block)

    def reject(reason: str) -> None:
        if was_split:
            block.restore(snapshot)
        logger.debug("Not merging %r: %s", snapshot, reason)
        return None

    x, y = position_axes(block)
    if _IGNORE_POSITION.search(x) or _IGNORE_POSITION.search(y):
        return reject("position is browser computed")
    offsets = (pixel_offset(x), pixel_offset(y))
    if None in offsets:
        return reject("position is not in pixels")
    if offsets != (0, 0):
        return reject("position is offset from the image origin")

    repeats = block.get("background-repeat").lower().split()
    repeats += [block.get("background-repeat-x").lower(), block.get("background-repeat-y").lower()]
    if _IGNORE_REPEAT.intersection(repeats):
        return reject("image repeats")

    image = block.get("background-image")
    if not image or "," in image:
        return reject("no single background image")
    url = image_url(image, formats)
    if url is None:
        return reject("not an accepted image format")
    if is_network_url(url):
        return reject("image is remote")
    path = (directory / unquote(url).lstrip("/")).resolve()
    if not path.is_file():
        return reject(f"image {path} does not exist")

    return Eligible(path=path, url=url, ref=BlockRef(block=block, snapshot=snapshot))


def image_url(value: str, formats: tuple[str, ...] = ("png",)) -> str | None:
    """Extract the image url from a ``background-image`` value.

    Query strings and fragments are dropped; None when the extension is not
    one of *formats*.
    """
    match = _IMAGE_RE.search(value)
    if match is None or match.group("ext").lower() not in formats:
        return None
    return match.group("url").strip()


def position_axes(block: DeclarationBlock) -> tuple[str, str]:
    """Current x and y position of *block*, split or not."""
    if block.has(POSITION_X) or block.has(POSITION_Y):
        return block.get(POSITION_X), block.get(POSITION_Y)
    return split_position(block.get("background-position"))


def pixel_offset(axis: str) -> int | None:
    """Pixel offset of one position axis, None when it is not expressible in px.

    ``left``/``top``, ``0`` and ``0%`` are 0; ``left 10px`` is 10.
    """
    tokens = axis.lower().split()
    if tokens and tokens[0] in ("left", "top"):
        tokens = tokens[1:]
    if not tokens:
        return 0
    if len(tokens) > 1:
        return None
    token = tokens[0]
    if token.endswith("%"):
        return 0 if _is_zero(token[:-1]) else None
    match = _PX_RE.match(token)
    if match is None:
        return None
    number = float(match.group(1))
    if match.group(2) is None and number != 0:
        return None
    return int(number)


def _is_zero(number: str) -> bool:
    try:
        return float(number) == 0
    except ValueError:
        return False

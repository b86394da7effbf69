"""Stylesheet rule tree built on cssutils.

A parsed file becomes a ``SheetNode`` whose children are tagged nodes:
``ImportNode`` (with the followed sheet, if any), ``GroupNode`` for rules
holding nested rules (``@media`` and friends), ``DeclarationNode`` for rules
with a declaration block, and ``OtherNode`` for everything else.  Local
``@import`` targets are loaded eagerly; ``serialize`` writes them back
inline, in place of the ``@import`` rule, and hoists the ``@import``
rules it keeps above everything else.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import cssutils
from cssutils.css import CSSRule, CSSStyleSheet

from spritely.css.declarations import DeclarationBlock
from spritely.errors import MissingStylesheetError

logger = logging.getLogger(__name__)

NETWORK_RE = re.compile(r"^((https?|ftp):)?//", re.IGNORECASE)
_CSS_HREF_RE = re.compile(r"^([^?#]+\.css)([?#].*)?$", re.IGNORECASE)


@dataclass
class DeclarationNode:
    rule: Any
    block: DeclarationBlock


@dataclass
class GroupNode:
    rule: Any
    children: list[Node] = field(default_factory=list)


@dataclass
class ImportNode:
    rule: Any
    href: str
    sheet: SheetNode | None = None  # None when not followed
    cyclic: bool = False  # target is already on the import path


@dataclass
class OtherNode:
    rule: Any


Node = Union[DeclarationNode, GroupNode, ImportNode, OtherNode]


@dataclass
class SheetNode:
    """One parsed stylesheet file."""

    path: Path
    sheet: CSSStyleSheet
    nodes: list[Node] = field(default_factory=list)

    @property
    def directory(self) -> Path:
        return self.path.parent


def _no_fetch(url: str) -> None:
    # Imports are resolved by load_sheet, never by cssutils.
    return None


def make_parser() -> cssutils.CSSParser:
    return cssutils.CSSParser(
        loglevel=logging.CRITICAL,
        raiseExceptions=False,
        fetcher=_no_fetch,
        validate=False,
    )


def is_network_url(url: str) -> bool:
    return bool(NETWORK_RE.match(url.strip()))


def resolve_import(href: str, directory: Path) -> Path | None:
    """Return the local file an ``@import`` href points at, or None.

    Network references, hrefs that do not name a ``.css`` file and targets
    that do not exist all resolve to None.
    """
    href = (href or "").strip()
    if not href or is_network_url(href):
        return None
    match = _CSS_HREF_RE.match(href)
    if not match:
        return None
    target = (directory / match.group(1)).resolve()
    return target if target.is_file() else None


def parse_sheet(text: str, path: str | Path, *, parser: cssutils.CSSParser | None = None) -> SheetNode:
    """Parse *text* as the stylesheet living at *path*, following local imports."""
    path = Path(path).resolve()
    return _parse(text, path, parser or make_parser(), frozenset())


def load_sheet(path: str | Path, *, parser: cssutils.CSSParser | None = None) -> SheetNode:
    """Read and parse the stylesheet file at *path*.

    Raises MissingStylesheetError when the file does not exist or can not
    be read.
    """
    path = Path(path).resolve()
    return _parse(_read(path), path, parser or make_parser(), frozenset())


def _read(path: Path) -> str:
    if not path.is_file():
        raise MissingStylesheetError(str(path))
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MissingStylesheetError(str(path), cause=exc) from exc


def _parse(text: str, path: Path, parser: cssutils.CSSParser, ancestors: frozenset[Path]) -> SheetNode:
    sheet = parser.parseString(text)
    node = SheetNode(path=path, sheet=sheet)
    node.nodes = _build_nodes(sheet.cssRules, path.parent, parser, ancestors | {path})
    return node


def _build_nodes(rules, directory: Path, parser: cssutils.CSSParser, chain: frozenset[Path]) -> list[Node]:
    # chain holds the files on the import path to here; only those make a cycle.
    nodes: list[Node] = []
    for rule in rules:
        if rule.type == CSSRule.IMPORT_RULE:
            nodes.append(_import(rule, directory, parser, chain))
        elif getattr(rule, "cssRules", None) is not None:
            nodes.append(GroupNode(rule=rule, children=_build_nodes(rule.cssRules, directory, parser, chain)))
        elif getattr(rule, "style", None) is not None:
            nodes.append(DeclarationNode(rule=rule, block=DeclarationBlock(rule.style)))
        else:
            nodes.append(OtherNode(rule=rule))
    return nodes


def _import(rule, directory: Path, parser: cssutils.CSSParser, chain: frozenset[Path]) -> ImportNode:
    node = ImportNode(rule=rule, href=rule.href or "")
    target = resolve_import(node.href, directory)
    if target is None:
        logger.debug("Not following @import %r", node.href)
    elif target in chain:
        logger.debug("Skipping cyclic @import %s", target)
        node.cyclic = True
    else:
        try:
            node.sheet = _parse(_read(target), target, parser, chain)
        except MissingStylesheetError as exc:
            logger.debug("Skipping @import %r: %s", node.href, exc)
    return node


def serialize(*nodes: SheetNode) -> str:
    """Serialize (possibly mutated) sheets as one text, inlining followed imports.

    ``@import`` rules that are kept (network or unresolved targets) are
    hoisted above all inlined rules, right after the first ``@charset``;
    cyclic imports are dropped since their content is already inlined.
    """
    head: list[str] = []
    imports: list[str] = []
    bodies = [_serialize(node, head, imports, media="", top=True) for node in nodes]
    return "\n".join(part for part in head[:1] + list(dict.fromkeys(imports)) + bodies if part)


def _serialize(node: SheetNode, head: list[str], imports: list[str], media: str, top: bool) -> str:
    parts: list[str] = []
    for child in node.nodes:
        rule = child.rule
        if isinstance(child, ImportNode):
            if child.cyclic:
                continue
            if child.sheet is None:
                imports.append(_import_text(rule, media))
                continue
            inner_media = _media_text(rule)
            inner = _serialize(child.sheet, head, imports, inner_media or media, top=False)
            if inner_media and inner:
                inner = f"@media {inner_media} {{\n{inner}\n}}"
            parts.append(inner)
        elif rule.type == CSSRule.CHARSET_RULE:
            if top:
                head.append(rule.cssText)
        else:
            parts.append(rule.cssText)
    return "\n".join(part for part in parts if part)


def _import_text(rule, media: str) -> str:
    """Text of a kept ``@import``, carrying the media of the sheet it was inlined from."""
    text = rule.cssText
    if media and not _media_text(rule):
        text = f"{text.rstrip().rstrip(';')} {media};"
    return text


def _media_text(rule) -> str:
    media = getattr(rule, "media", None)
    text = media.mediaText if media is not None else ""
    return "" if text in ("", "all") else text

"""Expand and collapse the ``background`` shorthand on a declaration block.

``split`` turns ``background: #fff url(a.png) no-repeat 0 -10px`` into its
longhands and breaks ``background-position`` into ``-x``/``-y``;
``merge`` performs the inverse so rewritten rules stay compact.
"""

from __future__ import annotations

import re

from spritely.css.declarations import DeclarationBlock

__all__ = [
    "LONGHANDS",
    "merge",
    "parse_background",
    "split",
    "split_position",
]

# Shorthand constituents in the order they are written back by ``merge``.
LONGHANDS = (
    "background-color",
    "background-image",
    "background-position",
    "background-repeat",
    "background-attachment",
    "background-origin",
    "background-clip",
)

POSITION_X = "background-position-x"
POSITION_Y = "background-position-y"

_GLOBAL_KEYWORDS = {"inherit", "initial", "unset", "revert"}
_REPEAT = {"repeat", "repeat-x", "repeat-y", "no-repeat", "space", "round"}
_ATTACHMENT = {"scroll", "fixed", "local"}
_BOX = {"border-box", "padding-box", "content-box", "text"}
_HORIZONTAL = {"left", "right"}
_VERTICAL = {"top", "bottom"}
_POSITION_KEYWORDS = _HORIZONTAL | _VERTICAL | {"center"}
_IMAGE_FUNCTIONS = ("url(", "image(", "image-set(", "element(", "cross-fade(")

_LENGTH_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([a-z]+|%)?$", re.IGNORECASE)


def _tokenize(value: str) -> list[list[str]]:
    """Split *value* into layers of whitespace separated tokens.

    Commas and whitespace inside parentheses or quotes do not separate.
    A ``/`` outside parentheses is emitted as its own token.
    """
    layers: list[list[str]] = [[]]
    token = ""
    depth = 0
    quote = ""

    def flush() -> None:
        nonlocal token
        if token:
            layers[-1].append(token)
            token = ""

    for char in value:
        if quote:
            token += char
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
            token += char
        elif char == "(":
            depth += 1
            token += char
        elif char == ")":
            depth = max(depth - 1, 0)
            token += char
        elif depth:
            token += char
        elif char == ",":
            flush()
            layers.append([])
        elif char == "/":
            flush()
            layers[-1].append("/")
        elif char.isspace():
            flush()
        else:
            token += char
    flush()
    return layers


def _is_image(token: str) -> bool:
    lowered = token.lower()
    return lowered == "none" or lowered.startswith(_IMAGE_FUNCTIONS) or "gradient(" in lowered


def _is_position(token: str) -> bool:
    lowered = token.lower()
    return (
        lowered in _POSITION_KEYWORDS
        or bool(_LENGTH_RE.match(lowered))
        or lowered.startswith("calc(")
    )


def _parse_layer(tokens: list[str]) -> dict[str, str] | None:
    found: dict[str, list[str]] = {}
    for token in tokens:
        lowered = token.lower()
        if token == "/" or lowered in _GLOBAL_KEYWORDS:
            return None
        if _is_image(token):
            key = "background-image"
        elif lowered in _REPEAT:
            key = "background-repeat"
        elif lowered in _ATTACHMENT:
            key = "background-attachment"
        elif lowered in _BOX:
            key = "background-origin" if "background-origin" not in found else "background-clip"
        elif _is_position(token):
            key = "background-position"
        else:
            key = "background-color"
        found.setdefault(key, []).append(token)

    if len(found.get("background-image", [])) > 1 or len(found.get("background-color", [])) > 1:
        return None
    if "background-origin" in found and "background-clip" not in found:
        found["background-clip"] = list(found["background-origin"])
    return {key: " ".join(values) for key, values in found.items()}


def parse_background(value: str) -> list[dict[str, str]]:
    """Interpret a ``background`` shorthand value.

    Returns one longhand mapping per comma separated layer, or an empty
    list when any layer can not be interpreted (global keywords, an inline
    ``/ size`` part, conflicting tokens).
    """
    layers = []
    for tokens in _tokenize(value.strip()):
        layer = _parse_layer(tokens)
        if layer is None:
            return []
        layers.append(layer)
    return layers


def split_position(value: str) -> tuple[str, str]:
    """Split a ``background-position`` value into its x and y parts.

    A single value leaves the other axis at ``center``; two values written
    vertical-first (``top left``) are swapped. Edge offsets such as
    ``right 10px top`` keep each offset with its keyword.
    """
    tokens = value.split()
    if not tokens:
        return "", ""

    parts: list[str] = []
    for token in tokens:
        keyword_only = parts and parts[-1].lower() in (_HORIZONTAL | _VERTICAL)
        if len(tokens) > 2 and keyword_only and token.lower() not in _POSITION_KEYWORDS:
            parts[-1] = f"{parts[-1]} {token}"
        else:
            parts.append(token)

    if len(parts) == 1:
        if parts[0].lower() in _VERTICAL:
            return "center", parts[0]
        return parts[0], "center"

    first, second = parts[0], parts[1]
    if first.split()[0].lower() in _VERTICAL or second.split()[0].lower() in _HORIZONTAL:
        first, second = second, first
    return first, second


def split(block: DeclarationBlock) -> bool:
    """Expand ``background`` into longhands and split the position axes.

    Returns True when the block was changed. Blocks without a shorthand, or
    whose shorthand has several layers or can not be interpreted, are left
    untouched.
    """
    shorthand = block.get("background")
    if not shorthand:
        return False
    layers = parse_background(shorthand)
    if len(layers) != 1:
        return False
    layer = layers[0]

    names = block.names()
    index = names.index("background")
    priority = block.priority("background")
    block.remove("background")

    # Longhands declared before the shorthand are reset by it; those after win.
    for name in LONGHANDS + (POSITION_X, POSITION_Y):
        if name in names and names.index(name) < index:
            block.remove(name)
    for name, value in layer.items():
        if name in names and names.index(name) > index:
            continue
        block.set(name, value, priority)

    position = block.remove("background-position")
    if position:
        x, y = split_position(position)
        if not block.has(POSITION_X):
            block.set(POSITION_X, x, priority)
        if not block.has(POSITION_Y):
            block.set(POSITION_Y, y, priority)
    return True


def merge(block: DeclarationBlock) -> bool:
    """Collapse the background longhands back into one ``background``.

    Only non-empty parts are kept. Returns True when a shorthand was written.
    """
    x = block.remove(POSITION_X)
    y = block.remove(POSITION_Y)
    position = f"{x} {y}".strip()
    if position:
        block.set("background-position", position)

    parts: list[str] = []
    important = False
    for name in LONGHANDS:
        value = block.get(name)
        if not value:
            continue
        important = important or block.priority(name) == "important"
        block.remove(name)
        parts.append(value)

    if not parts:
        return False
    block.set("background", " ".join(parts), "important" if important else "")
    return True

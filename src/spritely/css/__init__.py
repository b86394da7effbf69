from spritely.css.declarations import DeclarationBlock
from spritely.css.background import merge, parse_background, split, split_position
from spritely.css.tree import SheetNode, load_sheet, parse_sheet, serialize

__all__ = [
    "DeclarationBlock",
    "merge",
    "parse_background",
    "split",
    "split_position",
    "SheetNode",
    "load_sheet",
    "parse_sheet",
    "serialize",
]

from spritely.imaging.compositor import draw_sheet, rewrite_block, rewrite_group, write_sheet
from spritely.imaging.loader import ImageCache, effective_size, load_group, load_image, px_value

__all__ = [
    "ImageCache",
    "draw_sheet",
    "effective_size",
    "load_group",
    "load_image",
    "px_value",
    "rewrite_block",
    "rewrite_group",
    "write_sheet",
]

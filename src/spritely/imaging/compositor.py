"""Draw packed groups onto sheets and point their rules at the result."""

from __future__ import annotations

import io
import logging
import posixpath
from pathlib import Path

from PIL import Image

from spritely.css.background import POSITION_X, POSITION_Y, merge
from spritely.css.declarations import DeclarationBlock
from spritely.errors import WriteError
from spritely.imaging.loader import to_rgb
from spritely.model.image import ImageGroup, Placement
from spritely.model.sheet import Sheet

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def sheet_name(prefix: str, index: int, fmt: str) -> str:
    return f"{prefix}{index}.{fmt}"


def sheet_url(image_dist: str, name: str) -> str:
    """Url of a sheet as written in the output stylesheet."""
    return posixpath.normpath(posixpath.join(image_dist.replace("\\", "/"), name))


def draw_sheet(sheet: Sheet) -> Image.Image:
    """Paste every group's image at its offset on a transparent canvas.

    Pixels are copied as-is, without blending; the margin included in a
    group's size stays transparent.

    Raises ValueError when a group's image has not been decoded.
    """
    canvas = Image.new("RGBA", (max(sheet.width, 1), max(sheet.height, 1)), TRANSPARENT)
    for group in sheet.groups:
        if group.info is None:
            raise ValueError(f"Image {group.path} has not been loaded")
        canvas.paste(group.info.image, (group.x, group.y))
    return canvas


def encode_sheet(image: Image.Image, pil_format: str) -> bytes:
    buffer = io.BytesIO()
    to_rgb(image, pil_format).save(buffer, format=pil_format)
    return buffer.getvalue()


def write_sheet(sheet: Sheet, directory: Path, pil_format: str) -> Path:
    """Draw, encode and write *sheet*, then record each image's placement.

    Raises WriteError when the file can not be written.
    """
    path = directory / sheet.name
    data = encode_sheet(draw_sheet(sheet), pil_format)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise WriteError(str(path), cause=exc) from exc

    for group in sheet.groups:
        group.info.placement = Placement(
            sheet=sheet.name,
            url=sheet.url,
            x=group.x,
            y=group.y,
            width=group.width,
            height=group.height,
        )
    logger.info("Wrote sheet %s (%dx%d, %d images)", path, sheet.width, sheet.height, len(sheet.groups))
    return path


def rewrite_block(block: DeclarationBlock, url: str, x: int, y: int) -> None:
    """Point *block* at the sheet *url* with the image at (*x*, *y*) and merge the shorthand."""
    priority = block.priority("background-image")
    block.remove(POSITION_X)
    block.remove(POSITION_Y)
    block.set("background-image", f"url({url})", priority)
    block.set("background-position", f"{-x}px {-y}px", priority)
    merge(block)


def rewrite_group(group: ImageGroup, url: str | None = None) -> None:
    """Rewrite every block of *group* from its image's recorded placement.

    *url* overrides the placement's sheet url, which is relative to the
    stylesheet output root.
    """
    placement = group.info.placement if group.info else None
    if placement is None:
        raise ValueError(f"Image {group.path} has not been drawn")
    group.x, group.y = placement.x, placement.y
    for ref in group.blocks:
        rewrite_block(ref.block, url or placement.url, placement.x, placement.y)

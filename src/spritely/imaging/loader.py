"""Decode images once per run and size the groups that use them."""

from __future__ import annotations

import hashlib
import io
import logging
import re
from pathlib import Path

from PIL import Image

from spritely.errors import ImageDecodeError
from spritely.model.image import ImageGroup, ImageInfo

logger = logging.getLogger(__name__)

_PX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))px\s*$", re.IGNORECASE)


def encoded_size(image: Image.Image, pil_format: str) -> int:
    """Byte size of *image* once encoded as *pil_format*."""
    buffer = io.BytesIO()
    to_rgb(image, pil_format).save(buffer, format=pil_format)
    return buffer.tell()


def to_rgb(image: Image.Image, pil_format: str) -> Image.Image:
    """Drop the alpha channel for encoders that can not store it."""
    if pil_format == "JPEG" and image.mode != "RGB":
        return image.convert("RGB")
    return image


def load_image(path: Path, pil_format: str = "PNG") -> ImageInfo:
    """Decode *path* into an RGBA image and measure it.

    Raises ImageDecodeError when Pillow can not read the file.
    """
    try:
        data = path.read_bytes()
        with Image.open(io.BytesIO(data)) as source:
            image = source.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(str(path), cause=exc) from exc

    return ImageInfo(
        path=path,
        width=image.width,
        height=image.height,
        size=encoded_size(image, pil_format),
        fingerprint=hashlib.sha1(data).hexdigest(),
        image=image,
    )


class ImageCache:
    """Per-run registry of decoded images keyed by resolved path.

    Each path is decoded at most once, however many groups, stylesheets
    or units reference it.
    """

    def __init__(self, pil_format: str = "PNG") -> None:
        self._pil_format = pil_format
        self._infos: dict[Path, ImageInfo] = {}
        self._failed: dict[Path, ImageDecodeError] = {}
        self.decoded = 0

    def get(self, path: Path) -> ImageInfo:
        """Return the decoded image for *path*; a failed decode fails again without retrying."""
        if path in self._failed:
            raise self._failed[path]
        info = self._infos.get(path)
        if info is None:
            self.decoded += 1
            try:
                info = load_image(path, self._pil_format)
            except ImageDecodeError as exc:
                self._failed[path] = exc
                raise
            logger.debug("Decoded %s (%dx%d, %d bytes)", path, info.width, info.height, info.size)
            self._infos[path] = info
        return info

    def infos(self) -> list[ImageInfo]:
        return list(self._infos.values())

    def __contains__(self, path: object) -> bool:
        return path in self._infos

    def __len__(self) -> int:
        return len(self._infos)


def px_value(value: str) -> int:
    """Integer value of a ``px`` length; anything else counts as 0."""
    match = _PX_RE.match(value or "")
    return int(float(match.group(1))) if match else 0


def effective_size(group: ImageGroup, margin: int = 0) -> tuple[int, int]:
    """Largest of the declared box sizes and the natural size, plus *margin*.

    Raises ValueError when the group's image has not been decoded.
    """
    if group.info is None:
        raise ValueError(f"Image {group.path} has not been loaded")
    width, height = group.info.width, group.info.height
    for ref in group.blocks:
        width = max(width, px_value(ref.block.get("width")))
        height = max(height, px_value(ref.block.get("height")))
    return width + margin, height + margin


def load_group(group: ImageGroup, cache: ImageCache, margin: int = 0) -> ImageGroup:
    """Attach decoded image info to *group* and compute its placement size."""
    group.info = cache.get(group.path)
    group.width, group.height = effective_size(group, margin)
    return group

"""spritely model layer -- public type re-exports."""

from spritely.model.image import BlockRef, ImageGroup, ImageGroups, ImageInfo, Placement
from spritely.model.manifest import Manifest, ManifestEntry
from spritely.model.sheet import Sheet, StylesheetUnit

__all__ = [
    # image
    "Placement",
    "ImageInfo",
    "BlockRef",
    "ImageGroup",
    "ImageGroups",
    # sheet
    "Sheet",
    "StylesheetUnit",
    # manifest
    "Manifest",
    "ManifestEntry",
]

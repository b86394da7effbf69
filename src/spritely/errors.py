"""Error hierarchy for the sprite merge pipeline."""
from __future__ import annotations


class SpriteError(Exception):
    """Base error for all spritely errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigError(SpriteError):
    """The configuration is missing, unreadable or invalid.

    Raised before any stylesheet or image is touched.
    """


class MissingStylesheetError(SpriteError):
    """A source stylesheet does not resolve to an existing file."""

    def __init__(self, path: str, **kwargs) -> None:
        super().__init__(f"Stylesheet not found: {path}", **kwargs)
        self.path = path


class ImageDecodeError(SpriteError):
    """A referenced image could not be decoded."""

    def __init__(self, path: str, **kwargs) -> None:
        super().__init__(f"Cannot decode image: {path}", **kwargs)
        self.path = path


class PackingError(SpriteError):
    """The packer could neither find nor grow a region for an item.

    This signals a logic defect, never bad input data.
    """


class WriteError(SpriteError):
    """An output sheet or stylesheet could not be written."""

    def __init__(self, path: str, **kwargs) -> None:
        super().__init__(f"Cannot write output: {path}", **kwargs)
        self.path = path

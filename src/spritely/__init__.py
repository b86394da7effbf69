"""spritely - merge stylesheet background images into sprite sheets."""

__version__ = "0.1.0"

from spritely.config import SpriteConfig, load_config  # noqa: E402
from spritely.errors import (  # noqa: E402
    ConfigError,
    ImageDecodeError,
    MissingStylesheetError,
    PackingError,
    SpriteError,
    WriteError,
)
from spritely.pipeline import RunResult, merge  # noqa: E402

__all__ = [
    "__version__",
    "ConfigError",
    "ImageDecodeError",
    "MissingStylesheetError",
    "PackingError",
    "RunResult",
    "SpriteConfig",
    "SpriteError",
    "WriteError",
    "load_config",
    "merge",
]

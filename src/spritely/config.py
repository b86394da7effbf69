"""Sprite configuration: defaults, shorthand/legacy adaptation and file loading."""
from __future__ import annotations

import glob
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from spritely.errors import ConfigError

# Output format name -> Pillow encoder name.
OUTPUT_FORMATS: dict[str, str] = {
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
    "jpg": "JPEG",
    "jpeg": "JPEG",
}

DEFAULT_COMBINED_NAME = "sprite.css"

_GLOB_CHARS = set("*?[")


@dataclass(frozen=True)
class InputConfig:
    workspace: str = "."
    css_source: tuple[str, ...] = ()  # resolved, deduplicated stylesheet paths
    formats: tuple[str, ...] = ("png",)


@dataclass(frozen=True)
class OutputConfig:
    css_dist: str = "./sprite/"
    image_dist: str = "./img/"  # relative to css_dist
    max_single_size: int = 0  # bytes, 0 = unlimited
    margin: int = 0
    prefix: str = "sprite_"
    format: str = "png"
    combine: str = ""  # combined stylesheet name, "" = one output per input
    incremental: bool = False
    strict: bool = False

    @property
    def pil_format(self) -> str:
        return OUTPUT_FORMATS[self.format]

    @property
    def sheet_dir(self) -> Path:
        """Directory the sheet images are written to."""
        return Path(self.css_dist) / self.image_dist


@dataclass(frozen=True)
class SpriteConfig:
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(source: SpriteConfig | Mapping[str, Any] | str | os.PathLike) -> SpriteConfig:
    """Build a normalized SpriteConfig from an object, a mapping or a JSON file path.

    Raises ConfigError when the file is unreadable, no ``cssSource`` is
    configured, or no stylesheet matches.
    """
    if isinstance(source, SpriteConfig):
        return source
    if isinstance(source, (str, os.PathLike)):
        raw = _read_config_file(Path(source))
    elif isinstance(source, Mapping):
        raw = dict(source)
    else:
        raise ConfigError(f"Unsupported config type: {type(source).__name__}")

    raw_input, raw_output = _adapt(raw)

    workspace = Path(raw_input.get("workspace") or ".").resolve()
    css_source = _expand_sources(raw_input.get("cssSource"), workspace)

    formats = raw_input.get("format", "png")
    if isinstance(formats, str):
        formats = [formats]
    formats = tuple(f.lower().lstrip(".") for f in formats)

    out_format = str(raw_output.get("format", "png")).lower().lstrip(".")
    if out_format not in OUTPUT_FORMATS:
        raise ConfigError(f"Unsupported output format: {out_format!r}")

    combine = raw_output.get("combine", False)
    if combine is True:
        combine = DEFAULT_COMBINED_NAME
    elif not combine:
        combine = ""

    css_dist = Path(raw_output.get("cssDist", "./sprite/"))
    if not css_dist.is_absolute():
        css_dist = workspace / css_dist

    return SpriteConfig(
        input=InputConfig(
            workspace=str(workspace),
            css_source=css_source,
            formats=formats,
        ),
        output=OutputConfig(
            css_dist=str(css_dist.resolve()),
            image_dist=str(raw_output.get("imageDist", "./img/")),
            max_single_size=_non_negative_int(raw_output, "maxSingleSize", scale=1024),
            margin=_non_negative_int(raw_output, "margin"),
            prefix=str(raw_output.get("prefix", "sprite_")),
            format=out_format,
            combine=str(combine),
            incremental=bool(raw_output.get("incremental", False)),
            strict=bool(raw_output.get("strict", False)),
        ),
    )


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}", cause=exc) from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _adapt(raw: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Expand shorthand sections and map legacy option names."""
    raw_input = raw.get("input") or {}
    raw_output = raw.get("output") or {}
    if isinstance(raw_input, (str, list)):
        raw_input = {"cssSource": raw_input}
    if isinstance(raw_output, str):
        raw_output = {"cssDist": raw_output}
    raw_input = dict(raw_input)
    raw_output = dict(raw_output)

    legacy = (
        (raw_input, "cssSource", "cssRoot"),
        (raw_output, "cssDist", "cssRoot"),
        (raw_output, "imageDist", "imageRoot"),
        (raw_output, "maxSingleSize", "maxSize"),
    )
    for section, key, old_key in legacy:
        if not section.get(key) and old_key in section:
            section[key] = section.pop(old_key)
    return raw_input, raw_output


def _expand_sources(css_source: Any, workspace: Path) -> tuple[str, ...]:
    if not css_source:
        raise ConfigError("No cssSource configured")
    if isinstance(css_source, str):
        css_source = [css_source]

    files: list[str] = []
    for pattern in css_source:
        pattern = str(pattern)
        if pattern.endswith(("/", os.sep)):
            pattern += "*.css"
        full = pattern if os.path.isabs(pattern) else str(workspace / pattern)
        if _GLOB_CHARS & set(pattern):
            files.extend(sorted(glob.glob(full, recursive=True)))
        else:
            # Kept even when missing so the run can report it per unit.
            files.append(full)

    resolved = list(dict.fromkeys(os.path.normpath(f) for f in files))
    if not resolved:
        raise ConfigError(f"No stylesheet matches cssSource {css_source!r}")
    return tuple(resolved)


def _non_negative_int(section: dict[str, Any], key: str, scale: int = 1) -> int:
    value = section.get(key, 0) or 0
    try:
        number = int(float(value))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}", cause=exc) from exc
    if number < 0:
        raise ConfigError(f"{key} must not be negative, got {number}")
    return number * scale

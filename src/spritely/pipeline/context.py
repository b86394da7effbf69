"""Per-run state: everything one merge run shares between its stages."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

import cssutils

from spritely.config import SpriteConfig
from spritely.css.tree import make_parser
from spritely.events.bus import EventBus
from spritely.imaging.compositor import sheet_name, sheet_url
from spritely.imaging.loader import ImageCache
from spritely.model.manifest import Manifest
from spritely.model.sheet import Sheet


@dataclass
class RunResult:
    """What a run produced, handed to the caller and the completion callback."""

    elapsed_ms: int = 0
    sheets: list[Path] = field(default_factory=list)
    stylesheets: list[Path] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)  # unit/source path -> error
    skipped_images: list[str] = field(default_factory=list)


@dataclass
class RunContext:
    """State of a single merge run; built fresh for every call, never shared."""

    config: SpriteConfig
    event_bus: EventBus
    images: ImageCache
    parser: cssutils.CSSParser
    manifest: Manifest | None = None
    next_index: int = 0
    started: float = field(default_factory=time.monotonic)
    result: RunResult = field(default_factory=RunResult)

    @classmethod
    def create(cls, config: SpriteConfig, event_bus: EventBus | None = None) -> RunContext:
        ctx = cls(
            config=config,
            event_bus=event_bus or EventBus(),
            images=ImageCache(config.output.pil_format),
            parser=make_parser(),
        )
        if config.output.incremental:
            ctx.manifest = Manifest.load(ctx.manifest_path)
            ctx.next_index = ctx.manifest.max_index(config.output.prefix) + 1
        return ctx

    @property
    def sheet_dir(self) -> Path:
        return self.config.output.sheet_dir

    @property
    def manifest_path(self) -> Path:
        return self.sheet_dir / f"{self.config.output.prefix}manifest.json"

    def new_sheet(self) -> Sheet:
        """Allocate the next sheet; indices are consecutive across the whole run."""
        output = self.config.output
        index = self.next_index
        self.next_index += 1
        name = sheet_name(output.prefix, index, output.format)
        return Sheet(index=index, name=name, url=sheet_url(output.image_dist, name))

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

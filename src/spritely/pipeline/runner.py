"""Merge runner: wires collection, image loading, packing and rewriting together."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable

from spritely.config import SpriteConfig, load_config
from spritely.css.collector import collect
from spritely.css.tree import load_sheet, serialize
from spritely.errors import ImageDecodeError, MissingStylesheetError, WriteError
from spritely.events import types as events
from spritely.events.bus import EventBus
from spritely.imaging.compositor import rewrite_group, write_sheet
from spritely.imaging.loader import load_group
from spritely.model.image import ImageGroup
from spritely.model.sheet import StylesheetUnit
from spritely.packing.packer import pack
from spritely.packing.partition import partition
from spritely.pipeline.context import RunContext, RunResult
from spritely.pipeline.tasks import SequentialTasks

logger = logging.getLogger(__name__)


class SpriteRunner:
    """Runs one merge over every configured stylesheet.

    Without ``combine`` each stylesheet is its own unit with its own sheets;
    an image already drawn for an earlier unit is reused rather than drawn
    again. With ``combine`` all stylesheets share one set of sheets and are
    written as a single stylesheet.
    """

    def __init__(self, config: SpriteConfig, *, event_bus: EventBus | None = None) -> None:
        self.config = config
        self.ctx = RunContext.create(config, event_bus)

    @property
    def result(self) -> RunResult:
        return self.ctx.result

    def plan(self) -> list[tuple[StylesheetUnit, tuple[str, ...]]]:
        """Pair every output unit with the source paths feeding it."""
        sources = self.config.input.css_source
        css_dist = Path(self.config.output.css_dist)
        if self.config.output.combine:
            return [(StylesheetUnit(output=css_dist / self.config.output.combine), sources)]
        return [(StylesheetUnit(output=self._output_path(source)), (source,)) for source in sources]

    def run(self, done: Callable[[int], None] | None = None) -> RunResult:
        """Process every unit in order, then fire *done* with the elapsed milliseconds."""
        ctx = self.ctx
        ctx.event_bus.emit(events.RunStarted(sources=len(self.config.input.css_source)))

        tasks = SequentialTasks(ctx.event_bus)
        for unit, sources in self.plan():
            tasks.add(str(unit.output), lambda unit=unit, sources=sources: self._run_unit(unit, sources))

        def finish() -> None:
            if ctx.manifest is not None:
                self._save_manifest()
            ctx.result.elapsed_ms = ctx.elapsed_ms()
            logger.info("All done in %d ms", ctx.result.elapsed_ms)
            ctx.event_bus.emit(
                events.RunCompleted(
                    elapsed_ms=ctx.result.elapsed_ms,
                    sheets=len(ctx.result.sheets),
                    stylesheets=len(ctx.result.stylesheets),
                )
            )
            if done is not None:
                done(ctx.result.elapsed_ms)

        tasks.run(on_done=finish)
        return ctx.result

    # --- per unit -------------------------------------------------------------

    def _run_unit(self, unit: StylesheetUnit, sources: tuple[str, ...]) -> None:
        try:
            self.process_unit(unit, sources)
        except WriteError as exc:
            logger.warning("Failed to write %s: %s", unit.output, exc)
            self.ctx.result.failures[str(unit.output)] = str(exc)
            self.ctx.event_bus.emit(events.UnitFailed(path=str(unit.output), error=str(exc)))

    def process_unit(self, unit: StylesheetUnit, sources: tuple[str, ...]) -> None:
        """Collect, load, pack, draw and rewrite one unit, then write its stylesheet.

        Raises WriteError when a sheet or the stylesheet can not be written.
        """
        ctx = self.ctx
        for source in sources:
            try:
                sheet = load_sheet(source, parser=ctx.parser)
            except MissingStylesheetError as exc:
                logger.warning("Skipping %s: %s", source, exc)
                ctx.result.failures[source] = str(exc)
                continue
            unit.sources.append(sheet)
            collect(sheet, self.config.input.formats, unit.groups)

        if not unit.sources:
            return

        groups = self._load_images(unit)
        split = partition(groups, self.config.output.max_single_size)

        for batch in split.batches:
            packer = pack(batch)
            sheet = ctx.new_sheet()
            sheet.groups = batch
            sheet.width, sheet.height = packer.width, packer.height
            for group in batch:
                group.sheet_index = sheet.index
            path = write_sheet(sheet, ctx.sheet_dir, self.config.output.pil_format)
            unit.sheets.append(sheet)
            ctx.result.sheets.append(path)
            ctx.event_bus.emit(events.SheetWritten(path=str(path), images=len(batch)))
            if ctx.manifest is not None:
                for group in batch:
                    ctx.manifest.record(group.path, group.info.fingerprint, group.info.placement)

        for group in groups:
            rewrite_group(group, self._sheet_url(unit, group))

        self._write_stylesheet(unit)

    def _load_images(self, unit: StylesheetUnit) -> list[ImageGroup]:
        """Decode each group's image, one at a time, dropping the ones that fail."""
        ctx = self.ctx
        loaded: list[ImageGroup] = []
        for group in unit.groups:
            try:
                load_group(group, ctx.images, self.config.output.margin)
            except ImageDecodeError as exc:
                if self.config.output.strict:
                    raise
                logger.warning("Not merging %s: %s", group.url, exc)
                group.restore()
                unit.groups.discard(group.path)
                ctx.result.skipped_images.append(str(group.path))
                ctx.event_bus.emit(events.ImageSkipped(path=str(group.path), reason=str(exc)))
                continue
            info = group.info
            if ctx.manifest is not None and info.placement is None:
                info.placement = ctx.manifest.lookup(group.path, info.fingerprint, ctx.sheet_dir)
            loaded.append(group)
        return loaded

    def _write_stylesheet(self, unit: StylesheetUnit) -> None:
        text = serialize(*unit.sources) + "\n"
        try:
            unit.output.parent.mkdir(parents=True, exist_ok=True)
            unit.output.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise WriteError(str(unit.output), cause=exc) from exc
        logger.info("Wrote stylesheet %s", unit.output)
        self.ctx.result.stylesheets.append(unit.output)
        self.ctx.event_bus.emit(events.StylesheetWritten(path=str(unit.output)))

    def _sheet_url(self, unit: StylesheetUnit, group: ImageGroup) -> str:
        """Url of the sheet holding *group*, relative to the unit's stylesheet."""
        target = self.ctx.sheet_dir / group.info.placement.sheet
        return Path(os.path.relpath(target, unit.output.parent)).as_posix()

    def _save_manifest(self) -> None:
        try:
            self.ctx.manifest.save(self.ctx.manifest_path)
        except OSError as exc:
            raise WriteError(str(self.ctx.manifest_path), cause=exc) from exc

    def _output_path(self, source: str) -> Path:
        css_dist = Path(self.config.output.css_dist)
        relative = os.path.relpath(source, self.config.input.workspace)
        if relative.startswith(os.pardir):
            return css_dist / Path(source).name
        return css_dist / relative


def merge(
    config: SpriteConfig | Mapping[str, Any] | str | os.PathLike,
    done: Callable[[int], None] | None = None,
    *,
    event_bus: EventBus | None = None,
) -> RunResult:
    """Merge the background images of the configured stylesheets into sprite sheets.

    *config* is a SpriteConfig, a mapping in the JSON config layout or a
    path to a JSON config file. *done* receives the elapsed milliseconds
    once every stylesheet has been processed.

    Raises ConfigError before any file is touched when the configuration is
    unusable.
    """
    runner = SpriteRunner(load_config(config), event_bus=event_bus)
    return runner.run(done)

"""spritely CLI entry point: Click group with subcommands."""

from __future__ import annotations

import logging
import sys

import click

from spritely import __version__
from spritely.config import load_config
from spritely.errors import ConfigError, SpriteError
from spritely.events.bus import EventBus
from spritely.events import types as events


@click.group()
@click.version_option(version=__version__, prog_name="spritely")
def cli() -> None:
    """spritely - merge stylesheet background images into sprite sheets."""


@cli.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, help="Log every skipped rule and written file")
def merge(config_file: str, verbose: bool) -> None:
    """Merge the images referenced by the stylesheets in CONFIG_FILE."""
    from spritely.pipeline import merge as run_merge

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    bus = EventBus()
    bus.subscribe(events.SheetWritten, lambda e: click.echo(f"  sheet  {e.path} ({e.images} images)"))
    bus.subscribe(events.StylesheetWritten, lambda e: click.echo(f"  css    {e.path}"))
    bus.subscribe(events.UnitFailed, lambda e: click.echo(f"  failed {e.path}: {e.error}", err=True))

    try:
        result = run_merge(config_file, event_bus=bus)
    except SpriteError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"Done in {result.elapsed_ms} ms: {len(result.sheets)} sheet(s), "
        f"{len(result.stylesheets)} stylesheet(s)"
    )
    if result.skipped_images:
        click.echo(f"Images left unmerged: {len(result.skipped_images)}", err=True)
    if result.failures:
        sys.exit(1)


@cli.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def inspect(config_file: str) -> None:
    """Show the normalized configuration in CONFIG_FILE."""
    try:
        config = load_config(config_file)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    out = config.output
    click.echo(f"Workspace:   {config.input.workspace}")
    click.echo(f"Formats:     {', '.join(config.input.formats)}")
    click.echo(f"Stylesheets ({len(config.input.css_source)}):")
    for source in config.input.css_source:
        click.echo(f"  - {source}")
    click.echo(f"CSS output:  {out.css_dist}")
    click.echo(f"Sheet dir:   {out.sheet_dir}")
    click.echo(f"Sheet name:  {out.prefix}<n>.{out.format}")
    click.echo(f"Max size:    {out.max_single_size or 'unlimited'}")
    click.echo(f"Margin:      {out.margin}")
    click.echo(f"Combine:     {out.combine or 'no'}")
    click.echo(f"Incremental: {'yes' if out.incremental else 'no'}")

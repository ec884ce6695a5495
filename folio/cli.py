"""Command-line interface for Folio.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site from a source directory into an output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio static blog pipeline."""


@cli.command()
@click.argument(
    "source",
    type=click.Path(exists=True, file_okay=True, dir_okay=True, path_type=Path),
)
@click.argument("output", type=click.Path(file_okay=False, path_type=Path))
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("-v", "--verbose", is_flag=True, help="Log progress while building")
def build(source: Path, output: Path, drafts: bool, verbose: bool):
    """Build the site from SOURCE into OUTPUT."""
    _configure_logging(verbose)
    from .build import build_site
    from .errors import ConfigError

    try:
        result = build_site(source, output, include_drafts=drafts)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None

    published = len(result.site.documents)
    if result.ok:
        click.echo(f"Built {published} documents into {result.output_dir}")
        return

    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    for failure in result.failures:
        click.echo(click.style(f"  File: {_display_path(failure.source_path, source)}", fg="yellow"), err=True)
        click.echo(f"  Error: {failure.message}", err=True)
    click.echo(
        f"Published {published} documents into {result.output_dir}, "
        f"skipped {len(result.failures)}",
        err=True,
    )
    raise SystemExit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _display_path(path: Path, source: Path) -> str:
    root = source if source.is_dir() else source.parent
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def main():
    """Entry point for the CLI application."""
    cli()

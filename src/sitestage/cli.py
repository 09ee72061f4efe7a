"""CLI interface for sitestage.

Command-line tool for building a static site and previewing it locally.
"""

import logging
import time
from pathlib import Path

import click

from sitestage.config import Config


@click.group()
def cli() -> None:
    """Sitestage - Markdown content in, static site out."""


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover sitestage.toml)",
)
drafts_option = click.option(
    "--drafts",
    is_flag=True,
    help="Include draft pages (overrides config)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)


@cli.command()
@config_option
@click.option(
    "--clean",
    is_flag=True,
    help="Remove the output directory before building",
)
@drafts_option
@verbose_option
def build(config_path: Path | None, clean: bool, drafts: bool, verbose: bool) -> None:
    """Build the static site."""
    from sitestage.builder import SiteBuilder
    from sitestage.core.frontmatter import FrontMatterError

    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(include_drafts=drafts or None)

    started = time.perf_counter()
    try:
        written = SiteBuilder(config).build(clean=clean)
    except FrontMatterError as e:
        raise click.ClickException(str(e)) from e
    elapsed = time.perf_counter() - started

    click.echo(f"Built {len(written)} pages in {elapsed:.2f}s")
    click.echo(f"Output directory: {config.build.output_dir}")


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@drafts_option
@verbose_option
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    drafts: bool,
    verbose: bool,
) -> None:
    """Start the preview server."""
    from sitestage.server import run_server

    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        include_drafts=drafts or None,
    )

    click.echo(f"Starting server on http://{config.server.host}:{config.server.port}")
    click.echo(f"Content directory: {config.build.content_dir}")
    if config.build.include_drafts:
        click.echo("Drafts: included")

    run_server(config)

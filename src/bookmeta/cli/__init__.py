# ABOUTME: CLI package for bookmeta, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging
import tomllib
from pathlib import Path

import click
from pydantic import ValidationError
from rich.logging import RichHandler

from bookmeta.cli.commands import isbn_cmd, resolve_cmd, search_cmd
from bookmeta.config import ResolverSettings


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(package_name="bookmeta")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML settings file (environment BOOKMETA_* variables override it).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """bookmeta - resolve book metadata from Google Books and Open Library."""
    try:
        settings = ResolverSettings.load(config_path)
    except (ValidationError, tomllib.TOMLDecodeError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    _configure_logging("DEBUG" if verbose else settings.logging.level)
    ctx.obj = settings


cli.add_command(search_cmd.search)
cli.add_command(resolve_cmd.resolve)
cli.add_command(isbn_cmd.isbn)

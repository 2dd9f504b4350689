# ABOUTME: Shared Click options for bookmeta CLI commands.
# ABOUTME: Provides the query flags (--author, --isbn, --year, --source) and query building.

from collections.abc import Callable
from typing import Any

import click

from bookmeta.config import ResolverSettings
from bookmeta.core.resolver import SOURCES
from bookmeta.metadata.types import BookQuery


def query_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the common query options to a command."""
    func = click.option(
        "-s",
        "--source",
        "sources",
        multiple=True,
        type=click.Choice(sorted(SOURCES)),
        help="Only query this source (repeatable; default: all enabled sources).",
    )(func)
    func = click.option("-y", "--year", type=int, default=None, help="Publication year.")(func)
    func = click.option("-i", "--isbn", default=None, help="ISBN-10 or ISBN-13.")(func)
    func = click.option("-a", "--author", default=None, help="Author name.")(func)
    return func


def build_query(
    title: str,
    author: str | None,
    isbn: str | None,
    year: int | None,
    provider_ids: dict[str, str] | None = None,
) -> BookQuery:
    return BookQuery(
        title=title or None,
        author=author,
        isbn=isbn,
        year=year,
        provider_ids=provider_ids or {},
    )


def restrict_sources(settings: ResolverSettings, sources: tuple[str, ...]) -> ResolverSettings:
    """Return settings with only ``sources`` enabled (unchanged when none are given)."""
    if not sources:
        return settings
    updates = {
        name: settings.source(name).model_copy(update={"enabled": name in sources})
        for name in SOURCES
    }
    return settings.model_copy(update=updates)

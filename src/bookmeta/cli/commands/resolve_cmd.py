# ABOUTME: The `bookmeta resolve` command for fetching one full metadata record.
# ABOUTME: Tries sources in priority order and prints the first record found.

import asyncio

import click
from rich.console import Console
from rich.table import Table

from bookmeta.cli.options import build_query, query_options, restrict_sources
from bookmeta.config import ResolverSettings
from bookmeta.core.resolver import build_resolver
from bookmeta.metadata.types import BookQuery, BookRecord, ProviderIdKey

console = Console()


def _parse_ids(values: tuple[str, ...]) -> dict[str, str]:
    valid = {key.value for key in ProviderIdKey}
    ids: dict[str, str] = {}
    for value in values:
        key, sep, native_id = value.partition("=")
        if not sep or key not in valid or not native_id:
            raise click.BadParameter(
                f"expected KEY=VALUE with KEY one of {', '.join(sorted(valid))}: {value}",
                param_hint="--id",
            )
        ids[key] = native_id
    return ids


async def _resolve(settings: ResolverSettings, query: BookQuery) -> BookRecord | None:
    async with build_resolver(settings) as resolver:
        return await resolver.resolve(query)


@click.command("resolve")
@click.argument("title", default="")
@query_options
@click.option(
    "--id",
    "ids",
    multiple=True,
    help="Known native id, e.g. google_books=zyTCAlFPjgYC (repeatable).",
)
@click.pass_obj
def resolve(
    settings: ResolverSettings,
    title: str,
    author: str | None,
    isbn: str | None,
    year: int | None,
    sources: tuple[str, ...],
    ids: tuple[str, ...],
) -> None:
    """Resolve the best-matching book for TITLE and show its full record."""
    query = build_query(title, author, isbn, year, _parse_ids(ids))
    if not (query.title or query.isbn or query.provider_ids):
        raise click.UsageError("Give a TITLE, --isbn, or --id.")

    record = asyncio.run(_resolve(restrict_sources(settings, sources), query))
    if record is None:
        console.print("[yellow]No record found.[/yellow]")
        raise SystemExit(1)

    table = Table(title=record.name, show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", record.name)
    table.add_row("Author", ", ".join(record.authors) or "[dim]unknown[/dim]")
    table.add_row("Publisher", ", ".join(record.publishers) or "[dim]unknown[/dim]")
    table.add_row("Published", record.premiere_date.isoformat() if record.premiere_date else "?")
    table.add_row("Genres", ", ".join(record.genres) or "[dim]none[/dim]")
    if record.community_rating is not None:
        table.add_row("Rating", f"{record.community_rating:.1f}/10")
    table.add_row("Language", record.language or "[dim]unknown[/dim]")
    if record.page_count:
        table.add_row("Pages", str(record.page_count))
    table.add_row("Description", record.overview or "[dim]none[/dim]")
    if record.provider_ids:
        table.add_row("Identifiers", ", ".join(f"{k}={v}" for k, v in record.provider_ids.items()))

    console.print(table)

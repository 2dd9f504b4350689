# ABOUTME: The `bookmeta search` command for listing candidate matches per source.
# ABOUTME: Runs every enabled source concurrently and prints a ranked table for each.

import asyncio

import click
from rich.console import Console
from rich.table import Table

from bookmeta.cli.options import build_query, query_options, restrict_sources
from bookmeta.config import ResolverSettings
from bookmeta.core.resolver import build_resolver
from bookmeta.metadata.scoring import composite_score
from bookmeta.metadata.types import BookQuery, Candidate, ProviderIdKey

console = Console()


async def _search(settings: ResolverSettings, query: BookQuery) -> dict[str, list[Candidate]]:
    async with build_resolver(settings) as resolver:
        return await resolver.search_all(query)


@click.command("search")
@click.argument("title", default="")
@query_options
@click.pass_obj
def search(
    settings: ResolverSettings,
    title: str,
    author: str | None,
    isbn: str | None,
    year: int | None,
    sources: tuple[str, ...],
) -> None:
    """Search metadata sources for candidates matching TITLE or --isbn."""
    query = build_query(title, author, isbn, year)
    if not (query.title or query.isbn):
        raise click.UsageError("Give a TITLE or --isbn.")

    results = asyncio.run(_search(restrict_sources(settings, sources), query))

    fuzzy = settings.enable_fuzzy_matching
    total = 0
    for source, candidates in results.items():
        if not candidates:
            console.print(f"[yellow]{source}: no matches.[/yellow]")
            continue

        table = Table(title=source)
        table.add_column("#", style="dim", width=3)
        table.add_column("Score", width=5)
        table.add_column("Title", style="bold")
        table.add_column("Year", width=5)
        table.add_column("Author")
        table.add_column("ISBN")

        for index, candidate in enumerate(candidates, 1):
            table.add_row(
                str(index),
                str(composite_score(query, candidate) if fuzzy else 100),
                candidate.name,
                str(candidate.year) if candidate.year else "?",
                candidate.author or "[dim]unknown[/dim]",
                candidate.provider_ids.get(ProviderIdKey.ISBN, ""),
            )
        console.print(table)
        total += len(candidates)

    console.print(f"\n[dim]{total} result(s)[/dim]")

# ABOUTME: The `bookmeta isbn` command for pulling an ISBN out of free text.
# ABOUTME: Prints the normalized ISBN and its ISBN-13 form, or exits 1 if none validates.

import click
from rich.console import Console

from bookmeta.metadata.isbn import extract_isbn, to_isbn13

console = Console()


@click.command("isbn")
@click.argument("text")
def isbn(text: str) -> None:
    """Extract and validate an ISBN from TEXT (a filename, a title page line, ...)."""
    found = extract_isbn(text)
    if found is None:
        console.print("[red]No valid ISBN found.[/red]")
        raise SystemExit(1)

    kind = "ISBN-13" if len(found) == 13 else "ISBN-10"
    console.print(f"[bold]{kind}:[/bold] {found}")
    if kind == "ISBN-10":
        console.print(f"[bold]ISBN-13:[/bold] {to_isbn13(found)}")

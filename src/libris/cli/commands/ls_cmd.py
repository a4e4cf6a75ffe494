# ABOUTME: The `libris ls` command for listing stored books, optionally filtered by a pattern.
# ABOUTME: The pattern is matched case-insensitively against title, series, authors, tags and path.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from libris.cli.options import db_option, open_collection

console = Console()


@click.command("ls")
@click.argument("pattern", required=False)
@db_option
def ls(pattern: str | None, db_path: Path | None) -> None:
    """List books in the library, or only those matching PATTERN."""
    with open_collection(db_path) as collection:
        books = collection.search(pattern) if pattern else list(collection.books())

        if not books:
            console.print("[yellow]No books found.[/yellow]")
            return

        table = Table()
        table.add_column("ID", style="dim", width=4)
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Series")
        table.add_column("Lang", width=5)

        for book in books:
            series = book.series_info
            table.add_row(
                str(book.id),
                book.title or "",
                ", ".join(a.display_name for a in book.authors()) or "[dim]unknown[/dim]",
                str(series) if series else "",
                book.language or "?",
            )

        console.print(table)
        console.print(f"\n[dim]{len(books)} book(s)[/dim]")

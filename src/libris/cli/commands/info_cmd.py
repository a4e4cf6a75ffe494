# ABOUTME: The `libris info` command for displaying everything known about one book.
# ABOUTME: Loads the book lazily from the database and prints a Rich table.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from libris.cli.options import db_option, open_collection, require_book

console = Console()


@click.command("info")
@click.argument("book_id", type=int)
@db_option
def info(book_id: int, db_path: Path | None) -> None:
    """Show detailed metadata for a book by ID."""
    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")

        table.add_row("ID", str(book.id))
        table.add_row("Title", book.title or "")
        authors = book.authors()
        table.add_row("Authors", ", ".join(a.display_name for a in authors) or "unknown")
        if authors:
            table.add_row("Author Sort", ", ".join(a.sort_key for a in authors))
        table.add_row("Language", book.language or "?")
        table.add_row("Encoding", book.encoding_no_detection or "?")
        if book.series_info is not None:
            table.add_row("Series", str(book.series_info))
        if book.tags():
            table.add_row("Tags", ", ".join(t.full_name for t in book.tags()))
        if book.labels():
            table.add_row("Labels", ", ".join(book.labels()))
        if book.uids():
            table.add_row("Identifiers", ", ".join(str(uid) for uid in book.uids()))
        table.add_row("Bookmarks", "yes" if book.has_bookmark else "no")
        table.add_row("File", book.file.long_name)

        console.print(table)

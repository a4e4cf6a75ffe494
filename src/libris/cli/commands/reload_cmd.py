# ABOUTME: The `libris reload` command for re-reading a stored book's metadata from its file.
# ABOUTME: A failed read keeps the stored metadata unchanged.

from pathlib import Path

import click
from rich.console import Console

from libris.cli.options import books_dir_option, db_option, open_collection, require_book

console = Console()


@click.command("reload")
@click.argument("book_id", type=int)
@db_option
@books_dir_option
def reload(book_id: int, db_path: Path | None, books_dir: Path | None) -> None:
    """Re-read metadata for a book from its file."""
    with open_collection(db_path, books_dir) as collection:
        book = require_book(collection, book_id, console)
        if not collection.reload_book(book):
            console.print(
                f"[yellow]Could not read {book.file.short_name}; kept existing metadata.[/yellow]"
            )
            raise SystemExit(1)
        console.print(f"Reloaded [bold]{book.title}[/bold].")

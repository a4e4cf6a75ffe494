# ABOUTME: The `libris series` command for setting or clearing a book's series.
# ABOUTME: Writes only when the series name or index actually changes.

from decimal import Decimal, InvalidOperation
from pathlib import Path

import click
from rich.console import Console

from libris.cli.options import db_option, open_collection, require_book

console = Console()


@click.command("series")
@click.argument("book_id", type=int)
@click.argument("name", required=False)
@click.option("--index", "index", default=None, help="Position in the series, e.g. 2 or 2.5.")
@click.option("--clear", is_flag=True, default=False, help="Remove the book from its series.")
@db_option
def series(
    book_id: int, name: str | None, index: str | None, clear: bool, db_path: Path | None
) -> None:
    """Set the series NAME (and --index) of a book, or --clear it."""
    if not clear and not name:
        raise click.UsageError("Give a series NAME or --clear.")
    if index is not None:
        try:
            Decimal(index)
        except InvalidOperation as exc:
            raise click.BadParameter(f"'{index}' is not a number", param_hint="--index") from exc

    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)
        book.set_series_info(None if clear else name, index)
        if not collection.save_book(book):
            console.print("[dim]Series unchanged.[/dim]")
        elif book.series_info is None:
            console.print(f"Removed [bold]{book.title}[/bold] from its series.")
        else:
            console.print(f"[bold]{book.title}[/bold] is now {book.series_info}.")

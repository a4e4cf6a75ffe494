# ABOUTME: The `libris label` command group for a book's user labels (favorite, read, ...).
# ABOUTME: Provides add and rm subcommands.

from pathlib import Path

import click
from rich.console import Console

from libris.book.types import FAVORITE_LABEL, READ_LABEL
from libris.cli.options import db_option, open_collection, require_book

console = Console()


@click.group("label")
def label() -> None:
    """Manage book labels."""


@label.command(
    "add", help=f"Add a label such as '{FAVORITE_LABEL}' or '{READ_LABEL}' to a book."
)
@click.argument("book_id", type=int)
@click.argument("name")
@db_option
def label_add(book_id: int, name: str, db_path: Path | None) -> None:
    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)
        book.add_label(name)
        collection.save_book(book)
        console.print(f"Labeled [bold]{book.title}[/bold] [cyan]{name}[/cyan].")


@label.command("rm")
@click.argument("book_id", type=int)
@click.argument("name")
@db_option
def label_rm(book_id: int, name: str, db_path: Path | None) -> None:
    """Remove a label from a book."""
    with open_collection(db_path) as collection:
        name = name.strip()
        book = require_book(collection, book_id, console)
        if name not in book.labels():
            console.print(f"[red]Book {book_id} is not labeled '{name}'.[/red]")
            raise SystemExit(1)
        book.remove_label(name)
        collection.save_book(book)
        console.print(f"Removed label [cyan]{name}[/cyan] from book {book_id}.")

# ABOUTME: The `libris tag` command group for editing a book's tags.
# ABOUTME: Provides add and clear subcommands; changes are saved in one transaction.

from pathlib import Path

import click
from rich.console import Console

from libris.cli.options import db_option, open_collection, require_book

console = Console()


@click.group("tag")
def tag() -> None:
    """Manage book tags."""


@tag.command("add")
@click.argument("book_id", type=int)
@click.argument("tag_path")
@db_option
def tag_add(book_id: int, tag_path: str, db_path: Path | None) -> None:
    """Add a tag (use '/' for nested tags, e.g. Fiction/Mystery)."""
    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)
        book.add_tag(tag_path)
        if collection.save_book(book):
            console.print(f"Tagged [bold]{book.title}[/bold] with [cyan]{tag_path}[/cyan].")
        else:
            console.print(f"[dim]{book.title} already has tag {tag_path}.[/dim]")


@tag.command("clear")
@click.argument("book_id", type=int)
@db_option
def tag_clear(book_id: int, db_path: Path | None) -> None:
    """Remove every tag from a book."""
    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)
        book.remove_all_tags()
        collection.save_book(book)
        console.print(f"Removed all tags from [bold]{book.title}[/bold].")

# ABOUTME: Shared Click options and helpers for Libris CLI commands.
# ABOUTME: Provides --db / --books-dir decorators and a context manager that opens the collection.

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console

from libris.book.book import Book
from libris.core.collection import DEFAULT_BOOKS_DIR, BookCollection
from libris.db.connection import DEFAULT_DB_PATH, open_library
from libris.db.database import BooksDatabase

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

books_dir_option = click.option(
    "--books-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=f"Root of the book directory; demo books live in its Demos/ (default: {DEFAULT_BOOKS_DIR})",
)


@contextmanager
def open_collection(
    db_path: Path | None, books_dir: Path | None = None
) -> Iterator[BookCollection]:
    """Open the database and yield a BookCollection, closing the connection afterwards."""
    database = BooksDatabase(open_library(db_path or DEFAULT_DB_PATH))
    try:
        yield BookCollection(database, books_dir=books_dir or DEFAULT_BOOKS_DIR)
    finally:
        database.close()


def require_book(collection: BookCollection, book_id: int, console: Console) -> Book:
    """Return the book with ``book_id`` or exit with status 1."""
    book = collection.get_book_by_id(book_id)
    if book is None:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)
    return book

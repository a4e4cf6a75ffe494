# ABOUTME: BookCollection: finds, creates, caches and saves Book aggregates against one database.
# ABOUTME: Adds files to the library in bulk and searches loaded books by pattern.

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from libris.book.book import Book
from libris.book.hooks import DemoContentHook
from libris.book.types import BookFile
from libris.db.database import BooksDatabase
from libris.db.mapping import BookRow
from libris.formats.plugin import BookReadingError, PluginCollection, default_plugins

logger = logging.getLogger(__name__)

DEFAULT_BOOKS_DIR = Path.home() / "Books"
DEMO_DIR_NAME = "Demos"


@dataclass
class AddResult:
    """Summary of a bulk add."""

    added: list[Book] = field(default_factory=list)
    skipped: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)


class BookCollection:
    """Owns the Book objects loaded from one BooksDatabase.

    Books are cached by id so every caller sees the same in-memory object for
    a stored row. Files under ``<books_dir>/Demos`` are marked as demo content
    when they are first read.
    """

    def __init__(
        self,
        database: BooksDatabase,
        *,
        books_dir: Path = DEFAULT_BOOKS_DIR,
        plugins: PluginCollection | None = None,
    ) -> None:
        self.database = database
        self.books_dir = books_dir
        self.plugins = plugins if plugins is not None else default_plugins()
        self.hooks = [DemoContentHook(books_dir / DEMO_DIR_NAME)]
        self._books: dict[int, Book] = {}

    def _from_row(self, row: BookRow) -> Book:
        book = self._books.get(row.id)
        if book is None:
            book = Book.from_row(
                self.database,
                row.id,
                row.file,
                row.title,
                row.encoding,
                row.language,
                plugins=self.plugins,
                hooks=self.hooks,
            )
            self._books[row.id] = book
        return book

    def get_book_by_id(self, book_id: int) -> Book | None:
        """Return the (lean) Book for a stored id, or None if there is no such row."""
        book = self._books.get(book_id)
        if book is not None:
            return book
        row = self.database.load_book(book_id)
        return self._from_row(row) if row else None

    def get_book_by_file(self, path: Path) -> Book | None:
        """Return the stored Book for a file, or None if it has not been added."""
        row = self.database.load_book_by_file(BookFile.from_path(path))
        return self._from_row(row) if row else None

    def add_file(self, path: Path) -> Book:
        """Read a file and store it as a new book. Already-stored files are returned as is.

        Raises:
            ExtractorNotFound: If no plugin handles the file type.
            ExtractionFailed: If the file could not be read.
        """
        existing = self.get_book_by_file(path)
        if existing is not None:
            return existing
        book = Book.from_file(
            BookFile.from_path(path), self.database, plugins=self.plugins, hooks=self.hooks
        )
        book.save()
        self._books[book.id] = book
        logger.info("Added %r", book)
        return book

    def add_files(self, paths: list[Path]) -> AddResult:
        """Add many files. Unreadable files are recorded as errors, not raised."""
        result = AddResult()
        for path in paths:
            if self.get_book_by_file(path) is not None:
                result.skipped += 1
                continue
            try:
                result.added.append(self.add_file(path))
            except BookReadingError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                result.errors += 1
                result.error_details.append((path, str(exc)))
        return result

    def books(self) -> Iterator[Book]:
        """Iterate over every stored book, ordered by title."""
        for row in self.database.list_book_rows():
            yield self._from_row(row)

    def search(self, pattern: str) -> list[Book]:
        return [book for book in self.books() if book.matches(pattern)]

    def save_book(self, book: Book, force: bool = False) -> bool:
        written = book.save(force)
        if written:
            self._books[book.id] = book
        return written

    def reload_book(self, book: Book) -> bool:
        """Re-read a book's file and save the result. False if the file could not be read."""
        if not book.reload_info_from_file():
            return False
        book.save()
        return True

    def remove_book(self, book: Book) -> None:
        self.database.delete_book(book.id)
        self._books.pop(book.id, None)

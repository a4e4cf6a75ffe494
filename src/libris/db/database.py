# ABOUTME: BooksDatabase, the persistence gateway used by Book for loading and saving.
# ABOUTME: Per-entity CRUD for books, authors, tags, labels, series, uids, hyperlinks and bookmarks.

import logging
import sqlite3
import threading
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from libris.book.types import UID, Author, BookFile, SeriesInfo, Tag
from libris.db.mapping import (
    BookRow,
    row_to_author,
    row_to_book_row,
    row_to_series_info,
    row_to_uid,
    series_index_to_column,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateBookError(Exception):
    """Raised when inserting a book whose file is already stored."""


class BooksDatabase:
    """Wraps a sqlite3 connection and exposes the storage operations a Book needs.

    Outside a transaction every write commits immediately. Inside
    execute_as_transaction() writes are held until the unit of work returns
    and are rolled back together if it raises. A re-entrant lock keeps other
    threads out while a transaction is open.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    # --- Plumbing ---

    def execute_as_transaction(self, work: Callable[[], T]) -> T:
        """Run ``work`` as one atomic unit and return its result.

        Nested calls join the outermost transaction.
        """
        with self._lock:
            self._depth += 1
            try:
                result = work()
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    logger.debug("Rolling back transaction")
                    self._conn.rollback()
                raise
            self._depth -= 1
            if self._depth == 0:
                self._conn.commit()
            return result

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            cursor = self._conn.execute(sql, params)
            if self._depth == 0:
                self._conn.commit()
            return cursor

    def _query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def _query_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    # --- Book rows ---

    def insert_book_info(
        self, file: BookFile, encoding: str | None, language: str | None, title: str
    ) -> int:
        """Insert a book row and return its generated id.

        Raises:
            DuplicateBookError: If a row for this file already exists.
        """
        try:
            cursor = self._execute(
                "INSERT INTO books (file_path, encoding, language, title) VALUES (?, ?, ?, ?)",
                (file.long_name, encoding, language, title),
            )
        except sqlite3.IntegrityError as exc:
            if "books.file_path" in str(exc):
                raise DuplicateBookError(f"Book for {file} already exists") from exc
            raise
        return cursor.lastrowid  # type: ignore[return-value]

    def update_book_info(
        self,
        book_id: int,
        file: BookFile,
        encoding: str | None,
        language: str | None,
        title: str,
    ) -> None:
        """Update the scalar columns of a stored book.

        Raises:
            ValueError: If the book_id does not exist.
        """
        cursor = self._execute(
            "UPDATE books SET file_path = ?, encoding = ?, language = ?, title = ?, "
            "date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now') WHERE book_id = ?",
            (file.long_name, encoding, language, title, book_id),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    def load_book(self, book_id: int) -> BookRow | None:
        row = self._query_one("SELECT * FROM books WHERE book_id = ?", (book_id,))
        return row_to_book_row(row) if row else None

    def load_book_by_file(self, file: BookFile) -> BookRow | None:
        row = self._query_one("SELECT * FROM books WHERE file_path = ?", (file.long_name,))
        return row_to_book_row(row) if row else None

    def list_book_rows(self) -> list[BookRow]:
        """Return every stored book row, ordered by title."""
        rows = self._query("SELECT * FROM books ORDER BY title COLLATE NOCASE, book_id")
        return [row_to_book_row(row) for row in rows]

    def delete_book(self, book_id: int) -> None:
        """Delete a book and, through cascades, everything attached to it.

        Raises:
            ValueError: If the book_id does not exist.
        """
        cursor = self._execute("DELETE FROM books WHERE book_id = ?", (book_id,))
        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    # --- Authors ---

    def list_authors(self, book_id: int) -> list[Author]:
        rows = self._query(
            "SELECT a.name, a.sort_key FROM authors a "
            "JOIN book_author ba ON a.author_id = ba.author_id "
            "WHERE ba.book_id = ? ORDER BY ba.author_index",
            (book_id,),
        )
        return [row_to_author(row) for row in rows]

    def delete_all_book_authors(self, book_id: int) -> None:
        self._execute("DELETE FROM book_author WHERE book_id = ?", (book_id,))

    def save_book_author_info(self, book_id: int, index: int, author: Author) -> None:
        with self._lock:
            self._execute(
                "INSERT OR IGNORE INTO authors (name, sort_key) VALUES (?, ?)",
                (author.display_name, author.sort_key),
            )
            self._execute(
                "INSERT OR REPLACE INTO book_author (book_id, author_id, author_index) "
                "SELECT ?, author_id, ? FROM authors WHERE name = ? AND sort_key = ?",
                (book_id, index, author.display_name, author.sort_key),
            )

    # --- Tags ---

    def _tag_by_id(self, tag_id: int, cache: dict[int, Tag]) -> Tag:
        if tag_id in cache:
            return cache[tag_id]
        row = self._query_one("SELECT name, parent_id FROM tags WHERE tag_id = ?", (tag_id,))
        if row is None:
            raise ValueError(f"Tag with id {tag_id} not found")
        parent = self._tag_by_id(row["parent_id"], cache) if row["parent_id"] else None
        tag = Tag(row["name"], parent)
        cache[tag_id] = tag
        return tag

    def _tag_id(self, tag: Tag) -> int:
        """Return the id of ``tag``, creating it and its ancestors as needed."""
        parent_id = self._tag_id(tag.parent) if tag.parent is not None else None
        row = self._query_one(
            "SELECT tag_id FROM tags WHERE name = ? AND parent_id IS ?",
            (tag.name, parent_id),
        )
        if row is not None:
            return row["tag_id"]
        cursor = self._execute(
            "INSERT INTO tags (name, parent_id) VALUES (?, ?)", (tag.name, parent_id)
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def list_tags(self, book_id: int) -> list[Tag]:
        rows = self._query(
            "SELECT tag_id FROM book_tag WHERE book_id = ? ORDER BY rowid", (book_id,)
        )
        cache: dict[int, Tag] = {}
        return [self._tag_by_id(row["tag_id"], cache) for row in rows]

    def delete_all_book_tags(self, book_id: int) -> None:
        self._execute("DELETE FROM book_tag WHERE book_id = ?", (book_id,))

    def save_book_tag_info(self, book_id: int, tag: Tag) -> None:
        with self._lock:
            tag_id = self._tag_id(tag)
            self._execute(
                "INSERT OR IGNORE INTO book_tag (book_id, tag_id) VALUES (?, ?)",
                (book_id, tag_id),
            )

    # --- Labels ---

    def list_labels(self, book_id: int) -> list[str]:
        rows = self._query(
            "SELECT l.name FROM labels l "
            "JOIN book_label bl ON l.label_id = bl.label_id "
            "WHERE bl.book_id = ? ORDER BY bl.rowid",
            (book_id,),
        )
        return [row["name"] for row in rows]

    def set_label(self, book_id: int, label: str) -> None:
        with self._lock:
            self._execute("INSERT OR IGNORE INTO labels (name) VALUES (?)", (label,))
            self._execute(
                "INSERT OR IGNORE INTO book_label (book_id, label_id) "
                "SELECT ?, label_id FROM labels WHERE name = ?",
                (book_id, label),
            )

    def remove_label(self, book_id: int, label: str) -> None:
        self._execute(
            "DELETE FROM book_label WHERE book_id = ? "
            "AND label_id IN (SELECT label_id FROM labels WHERE name = ?)",
            (book_id, label),
        )

    # --- Series ---

    def get_series_info(self, book_id: int) -> SeriesInfo | None:
        row = self._query_one(
            "SELECT s.name, bs.book_index FROM series s "
            "JOIN book_series bs ON s.series_id = bs.series_id "
            "WHERE bs.book_id = ?",
            (book_id,),
        )
        return row_to_series_info(row) if row else None

    def save_book_series_info(self, book_id: int, info: SeriesInfo | None) -> None:
        """Replace the book's series. ``None`` removes it."""
        with self._lock:
            if info is None:
                self._execute("DELETE FROM book_series WHERE book_id = ?", (book_id,))
                return
            self._execute("INSERT OR IGNORE INTO series (name) VALUES (?)", (info.name,))
            self._execute(
                "INSERT OR REPLACE INTO book_series (book_id, series_id, book_index) "
                "SELECT ?, series_id, ? FROM series WHERE name = ?",
                (book_id, series_index_to_column(info), info.name),
            )

    # --- Identifiers ---

    def list_uids(self, book_id: int) -> list[UID]:
        rows = self._query(
            "SELECT type, uid FROM book_uid WHERE book_id = ? ORDER BY rowid", (book_id,)
        )
        return [row_to_uid(row) for row in rows]

    def delete_all_book_uids(self, book_id: int) -> None:
        self._execute("DELETE FROM book_uid WHERE book_id = ?", (book_id,))

    def save_book_uid(self, book_id: int, uid: UID) -> None:
        self._execute(
            "INSERT OR IGNORE INTO book_uid (book_id, type, uid) VALUES (?, ?, ?)",
            (book_id, uid.type, uid.id),
        )

    # --- Visited hyperlinks ---

    def load_visited_hyperlinks(self, book_id: int) -> list[str]:
        rows = self._query(
            "SELECT hyperlink_id FROM visited_hyperlinks WHERE book_id = ?", (book_id,)
        )
        return [row["hyperlink_id"] for row in rows]

    def add_visited_hyperlink(self, book_id: int, link_id: str) -> None:
        self._execute(
            "INSERT OR IGNORE INTO visited_hyperlinks (book_id, hyperlink_id) VALUES (?, ?)",
            (book_id, link_id),
        )

    # --- Bookmarks ---

    def add_bookmark(self, book_id: int, text: str = "", visible: bool = True) -> int:
        cursor = self._execute(
            "INSERT INTO bookmarks (book_id, text, visible) VALUES (?, ?, ?)",
            (book_id, text, int(visible)),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def has_visible_bookmark(self, book_id: int) -> bool:
        row = self._query_one(
            "SELECT 1 FROM bookmarks WHERE book_id = ? AND visible = 1 LIMIT 1", (book_id,)
        )
        return row is not None

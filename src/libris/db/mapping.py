# ABOUTME: Converts SQLite rows into book rows and value objects.
# ABOUTME: Keeps column naming knowledge out of the Book aggregate.

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from libris.book.types import UID, Author, BookFile, SeriesInfo, parse_series_index


@dataclass(frozen=True)
class BookRow:
    """The scalar columns of a stored book, enough to build a lean Book."""

    id: int
    file: BookFile
    title: str
    encoding: str | None
    language: str | None
    date_added: str
    date_modified: str


def row_to_book_row(row: Any) -> BookRow:
    return BookRow(
        id=row["book_id"],
        file=BookFile(Path(row["file_path"])),
        title=row["title"],
        encoding=row["encoding"],
        language=row["language"],
        date_added=row["date_added"],
        date_modified=row["date_modified"],
    )


def row_to_author(row: Any) -> Author:
    return Author(row["name"], row["sort_key"])


def row_to_series_info(row: Any) -> SeriesInfo:
    return SeriesInfo(row["name"], parse_series_index(row["book_index"]))


def series_index_to_column(info: SeriesInfo) -> str | None:
    """Serialize a series index without losing decimal precision."""
    return str(info.index) if info.index is not None else None


def row_to_uid(row: Any) -> UID:
    return UID(row["type"], row["uid"])

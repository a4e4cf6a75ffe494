# ABOUTME: The Book aggregate and the value objects it carries.
# ABOUTME: Exports Book plus Author, Tag, SeriesInfo, UID, BookFile and CoverImage.

from libris.book.book import Book
from libris.book.hooks import DemoContentHook
from libris.book.types import (
    FAVORITE_LABEL,
    READ_LABEL,
    UID,
    Author,
    BookFile,
    CoverImage,
    SeriesInfo,
    Tag,
)

__all__ = [
    "FAVORITE_LABEL",
    "READ_LABEL",
    "UID",
    "Author",
    "Book",
    "BookFile",
    "CoverImage",
    "DemoContentHook",
    "SeriesInfo",
    "Tag",
]

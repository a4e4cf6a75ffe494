# ABOUTME: Public API for the Libris persistence layer.
# ABOUTME: Exports connection management, the BooksDatabase gateway and row types.

from libris.db.connection import DEFAULT_DB_PATH, open_library
from libris.db.database import BooksDatabase, DuplicateBookError
from libris.db.mapping import BookRow

__all__ = [
    "DEFAULT_DB_PATH",
    "BookRow",
    "BooksDatabase",
    "DuplicateBookError",
    "open_library",
]

# ABOUTME: Application services built on the Book aggregate.
# ABOUTME: Exports BookCollection and its bulk-add result type.

from libris.core.collection import DEFAULT_BOOKS_DIR, AddResult, BookCollection

__all__ = ["DEFAULT_BOOKS_DIR", "AddResult", "BookCollection"]

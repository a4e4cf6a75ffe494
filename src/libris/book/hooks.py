# ABOUTME: Optional hooks run after a Book has been read from its file.
# ABOUTME: DemoContentHook marks bundled demo books with a title suffix and a tag.

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from libris.book.book import Book

ReadHook = Callable[["Book"], None]

DEMO_MARKER = "demo"


class DemoContentHook:
    """Appends `` (demo)`` to the title and tags the book when it lives under demo_dir."""

    def __init__(self, demo_dir: Path, marker: str = DEMO_MARKER) -> None:
        self.demo_dir = demo_dir
        self.marker = marker

    def __call__(self, book: Book) -> None:
        if not book.file.is_under(self.demo_dir):
            return
        book.title = f"{book.title} ({self.marker})"
        book.add_tag(self.marker)

# ABOUTME: Plain-text book plugin: no embedded metadata, so it detects encoding and hashes the file.
# ABOUTME: Titles for text files come from the Book's file-name fallback.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from libris.book.types import BookFile, CoverImage
from libris.formats.hashing import file_hash_uid
from libris.formats.plugin import ExtractionFailed

if TYPE_CHECKING:
    from libris.book.book import Book

logger = logging.getLogger(__name__)

_SAMPLE_SIZE = 65536  # 64 KB

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


def detect_encoding(sample: bytes) -> str:
    """Guess a text encoding from a leading sample of the file."""
    for bom, encoding in _BOMS:
        if sample.startswith(bom):
            return encoding
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut off by the sample boundary is still UTF-8.
        if exc.start < len(sample) - 3:
            return "windows-1252"
    return "utf-8"


class PlainTextPlugin:
    """Handles ``.txt`` files."""

    name = "plaintext"

    def supports(self, file: BookFile) -> bool:
        return file.extension == ".txt"

    def _sample(self, file: BookFile) -> bytes:
        try:
            with open(file.path, "rb") as f:
                return f.read(_SAMPLE_SIZE)
        except OSError as exc:
            raise ExtractionFailed(f"Failed to read {file}: {exc}", file) from exc

    def read_meta_info(self, book: Book) -> None:
        book.encoding = detect_encoding(self._sample(book.file))

    def read_uids(self, book: Book) -> None:
        try:
            book.add_uid(file_hash_uid(book.file.path))
        except OSError as exc:
            raise ExtractionFailed(f"Failed to hash {book.file}: {exc}", book.file) from exc

    def detect_language_and_encoding(self, book: Book) -> None:
        book.encoding = detect_encoding(self._sample(book.file))
        logger.debug("Detected encoding %s for %s", book.encoding_no_detection, book.file)

    def read_cover(self, file: BookFile) -> CoverImage | None:
        return None

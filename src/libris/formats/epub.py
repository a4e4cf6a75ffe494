# ABOUTME: EPUB metadata extraction plugin built on ebooklib.
# ABOUTME: Defensive wrapper that turns malformed files into ExtractionFailed errors.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import ebooklib
from ebooklib import epub

from libris.book.types import BookFile, CoverImage, Tag
from libris.formats.hashing import file_hash_uid
from libris.formats.plugin import ExtractionFailed

if TYPE_CHECKING:
    from libris.book.book import Book

logger = logging.getLogger(__name__)

_OPF_NS = "http://www.idpf.org/2007/opf"

# Scheme names normalized to the uid types used across the library.
_SCHEME_ALIASES = {
    "isbn": "ISBN",
    "isbn10": "ISBN",
    "isbn-10": "ISBN",
    "isbn13": "ISBN",
    "isbn-13": "ISBN",
    "uuid": "UUID",
    "calibre": "calibre",
    "mobi-asin": "ASIN",
    "amazon": "ASIN",
    "doi": "DOI",
}


def _attr(attrs: dict[str, str], name: str) -> str | None:
    """Look up an OPF attribute whether or not ebooklib kept its namespace."""
    for key in (name, f"opf:{name}", f"{{{_OPF_NS}}}{name}"):
        value = attrs.get(key)
        if value:
            return value.strip()
    return None


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_calibre_meta(book: epub.EpubBook, name: str) -> str | None:
    """Read a ``<meta name="calibre:NAME" content="..."/>`` value from any namespace."""
    for entries in book.metadata.values():
        for _value, attrs in entries.get(name, []):
            if attrs.get("name") == f"calibre:{name}" and attrs.get("content"):
                return attrs["content"].strip()
    return None


def _classify_identifier(value: str, attrs: dict[str, str]) -> tuple[str, str]:
    """Return a (type, id) pair for a dc:identifier entry."""
    scheme = _attr(attrs, "scheme")
    if scheme:
        return _SCHEME_ALIASES.get(scheme.lower(), scheme), value
    lowered = value.lower()
    if lowered.startswith("urn:uuid:"):
        return "UUID", value[len("urn:uuid:"):]
    if lowered.startswith("urn:isbn:"):
        return "ISBN", value[len("urn:isbn:"):]
    cleaned = value.replace("-", "").replace(" ", "")
    if len(cleaned) in (10, 13) and cleaned.rstrip("Xx").isdigit():
        return "ISBN", value
    return "ID", value


def _extract_cover_image(book: epub.EpubBook) -> CoverImage | None:
    """Extract cover image data from an EPUB, if present."""
    cover_id = None
    meta_entries = book.get_metadata("OPF", "cover")
    if meta_entries:
        cover_id = meta_entries[0][1].get("content")

    if cover_id:
        cover_item = book.get_item_with_id(cover_id)
        if cover_item:
            return CoverImage(cover_item.get_content(), cover_item.media_type or "image/jpeg")

    # Fallback: look for images with "cover" in the id or filename
    for item in book.get_items():
        if item.get_type() not in (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER):
            continue
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            return CoverImage(item.get_content(), item.media_type or "image/jpeg")

    return None


class EpubPlugin:
    """Reads title, authors, language, subjects, calibre series and identifiers from EPUBs."""

    name = "epub"

    def supports(self, file: BookFile) -> bool:
        return file.extension == ".epub"

    def _open(self, file: BookFile) -> epub.EpubBook:
        if not file.path.exists():
            raise ExtractionFailed(f"File not found: {file}", file)
        try:
            return epub.read_epub(str(file.path), options={"ignore_ncx": True})
        except Exception as exc:
            raise ExtractionFailed(f"Failed to read EPUB: {file}: {exc}", file) from exc

    def read_meta_info(self, book: Book) -> None:
        ebook = self._open(book.file)

        title = _get_metadata_value(ebook, "DC", "title")
        if title:
            book.title = title

        language = _get_metadata_value(ebook, "DC", "language")
        if language:
            book.language = language

        for value, attrs in ebook.get_metadata("DC", "creator"):
            if not value:
                continue
            role = _attr(attrs, "role")
            if role and role.lower() != "aut":
                continue
            book.add_author(str(value), _attr(attrs, "file-as") or "")

        for value, _attrs in ebook.get_metadata("DC", "subject"):
            tag = Tag.from_path(str(value)) if value else None
            if tag is not None:
                book.add_tag(tag)

        series = _get_calibre_meta(ebook, "series")
        if series:
            book.set_series_info(series, _get_calibre_meta(ebook, "series_index"))

        self._add_identifiers(ebook, book)

    def read_uids(self, book: Book) -> None:
        ebook = self._open(book.file)
        self._add_identifiers(ebook, book)
        if not book.uids():
            try:
                book.add_uid(file_hash_uid(book.file.path))
            except OSError as exc:
                raise ExtractionFailed(f"Failed to hash {book.file}: {exc}", book.file) from exc

    def detect_language_and_encoding(self, book: Book) -> None:
        # EPUB content documents are XML; the container mandates UTF-8 or UTF-16.
        book.encoding = "utf-8"
        if book.language is None:
            language = _get_metadata_value(self._open(book.file), "DC", "language")
            if language:
                book.language = language

    def read_cover(self, file: BookFile) -> CoverImage | None:
        return _extract_cover_image(self._open(file))

    def _add_identifiers(self, ebook: epub.EpubBook, book: Book) -> None:
        for value, attrs in ebook.get_metadata("DC", "identifier"):
            if not value:
                continue
            uid_type, uid_value = _classify_identifier(str(value).strip(), attrs)
            book.add_uid(uid_type, uid_value)
        logger.debug("Read %d identifier(s) from %s", len(book.uids()), book.file)

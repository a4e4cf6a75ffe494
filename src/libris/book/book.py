# ABOUTME: The Book aggregate: current metadata, dirty tracking, lazy rehydration and saving.
# ABOUTME: Reconciles the extractor plugins, the SQLite store, and user edits for one book file.

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

from libris.book.cover import CoverCache
from libris.book.hooks import ReadHook
from libris.book.titled import SortableTitle
from libris.book.types import UID, Author, BookFile, CoverImage, SeriesInfo, Tag, parse_series_index
from libris.formats.plugin import (
    BookReadingError,
    ExtractorNotFound,
    FormatPlugin,
    PluginCollection,
    default_plugins,
)

if TYPE_CHECKING:
    from libris.db.database import BooksDatabase

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


def _resolve_plugin(plugins: PluginCollection, file: BookFile) -> FormatPlugin:
    plugin = plugins.get_plugin(file)
    if plugin is None:
        raise ExtractorNotFound(f"No metadata plugin for {file}", file)
    return plugin


def _title_from_file_name(file: BookFile) -> str:
    name = file.short_name
    index = name.rfind(".")
    return name[:index] if index > 0 else name


class Book:
    """In-memory metadata for one book file.

    A Book is either fresh (built from its file with from_file(), id -1,
    dirty) or rehydrated (built from a store row with from_row(), with
    authors, tags, labels, series, uids and the bookmark flag loaded on
    first access). All edits go through the methods below, which keep the
    dirty flag honest: only real changes mark the book dirty, and save()
    flushes a dirty book to the store in a single transaction.

    Equality and hashing use the backing file only, so two snapshots of the
    same file are interchangeable in sets and dicts.
    """

    def __init__(
        self,
        file: BookFile,
        database: BooksDatabase | None = None,
        *,
        book_id: int = -1,
        title: str | None = None,
        encoding: str | None = None,
        language: str | None = None,
        plugins: PluginCollection | None = None,
        hooks: Iterable[ReadHook] = (),
    ) -> None:
        self.file = file
        self._database = database
        self._plugins = plugins if plugins is not None else default_plugins()
        self._hooks = tuple(hooks)

        self._id = book_id
        self._titled = SortableTitle(title)
        self._encoding = encoding
        self._language = language

        self._authors: list[Author] = []
        self._tags: list[Tag] = []
        self._labels: list[str] = []
        self._uids: list[UID] = []
        self._series_info: SeriesInfo | None = None
        self._has_bookmark = False

        self._dirty = book_id == -1
        self._lists_loaded = book_id == -1 or database is None
        self._load_lock = threading.Lock()
        self._save_lock = threading.Lock()

        self._visited_hyperlinks: set[str] | None = None
        self._hyperlink_lock = threading.Lock()

        self._cover = CoverCache()

    # --- Construction ---

    @classmethod
    def from_file(
        cls,
        file: BookFile,
        database: BooksDatabase | None = None,
        *,
        plugins: PluginCollection | None = None,
        hooks: Iterable[ReadHook] = (),
    ) -> Book:
        """Build a fresh, unsaved Book by reading metadata from its file.

        Raises:
            ExtractorNotFound: If no plugin handles the file type.
            ExtractionFailed: If the plugin could not read the file.
        """
        plugins = plugins if plugins is not None else default_plugins()
        plugin = _resolve_plugin(plugins, file)
        book = cls(file, database, plugins=plugins, hooks=hooks)
        book._read_meta_info(plugin)
        return book

    @classmethod
    def from_row(
        cls,
        database: BooksDatabase,
        book_id: int,
        file: BookFile,
        title: str | None,
        encoding: str | None,
        language: str | None,
        *,
        plugins: PluginCollection | None = None,
        hooks: Iterable[ReadHook] = (),
    ) -> Book:
        """Build a lean Book from a stored row. List fields load on first access."""
        return cls(
            file,
            database,
            book_id=book_id,
            title=title,
            encoding=encoding,
            language=language,
            plugins=plugins,
            hooks=hooks,
        )

    def get_plugin(self) -> FormatPlugin:
        """Resolve the metadata plugin for this book's file.

        Raises:
            ExtractorNotFound: If no plugin handles the file type.
        """
        return _resolve_plugin(self._plugins, self.file)

    def _read_meta_info(self, plugin: FormatPlugin) -> None:
        self._encoding = None
        self._language = None
        self._titled.title = None
        self._authors = []
        self._tags = []
        self._series_info = None
        self._uids = []
        self._dirty = True

        plugin.read_meta_info(self)
        # Some plugins only produce identifiers when asked for them directly.
        if not self._uids:
            plugin.read_uids(self)

        if self._titled.is_empty():
            self._titled.title = _title_from_file_name(self.file)

        for hook in self._hooks:
            hook(self)

    def reload_info_from_file(self) -> bool:
        """Re-read metadata from the file, keeping the current state if that fails.

        Returns:
            True if the file was read, False if the previous state was kept.
        """
        self._ensure_lists()
        snapshot = self._snapshot()
        try:
            self._read_meta_info(self.get_plugin())
        except BookReadingError as exc:
            logger.debug("Keeping previous metadata for %r: %s", self, exc)
            self._restore(snapshot)
            return False
        self._cover.invalidate()
        return True

    def _snapshot(self) -> dict:
        return {
            "title": self._titled.title,
            "encoding": self._encoding,
            "language": self._language,
            "authors": list(self._authors),
            "tags": list(self._tags),
            "series_info": self._series_info,
            "uids": list(self._uids),
            "dirty": self._dirty,
        }

    def _restore(self, snapshot: dict) -> None:
        self._titled.title = snapshot["title"]
        self._encoding = snapshot["encoding"]
        self._language = snapshot["language"]
        self._authors = snapshot["authors"]
        self._tags = snapshot["tags"]
        self._series_info = snapshot["series_info"]
        self._uids = snapshot["uids"]
        self._dirty = snapshot["dirty"]

    def update_from(self, other: Book) -> None:
        """Copy metadata from another snapshot of the same stored book."""
        if self._id != other._id:
            return
        other._ensure_lists()
        self._titled.title = other._titled.title
        self._encoding = other._encoding
        self._language = other._language
        self._authors = list(other._authors)
        self._tags = list(other._tags)
        self._labels = list(other._labels)
        self._series_info = other._series_info
        self._has_bookmark = other._has_bookmark
        self._lists_loaded = True

    # --- Lazy loading ---

    def _ensure_lists(self) -> None:
        if self._lists_loaded:
            return
        with self._load_lock:
            if self._lists_loaded:
                return
            self._load_lists()
            recover_uids = not self._uids
        if recover_uids:
            self._recover_uids()

    def _load_lists(self) -> None:
        database = self._require_database()
        self._authors = database.list_authors(self._id)
        self._tags = database.list_tags(self._id)
        self._labels = database.list_labels(self._id)
        self._series_info = database.get_series_info(self._id)
        self._uids = database.list_uids(self._id)
        self._has_bookmark = database.has_visible_bookmark(self._id)
        self._lists_loaded = True

    def _recover_uids(self) -> None:
        try:
            self.get_plugin().read_uids(self)
        except BookReadingError as exc:
            logger.debug("No identifiers recovered for %r: %s", self, exc)
            return
        if self._uids:
            logger.info("Recovered %d identifier(s) for %r", len(self._uids), self)
            self.save(force=True)

    def _require_database(self) -> BooksDatabase:
        if self._database is None:
            raise ValueError(f"{self!r} is not attached to a database")
        return self._database

    # --- Scalar fields ---

    @property
    def id(self) -> int:
        return self._id

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def title(self) -> str | None:
        return self._titled.title

    @title.setter
    def title(self, value: str | None) -> None:
        self._ensure_lists()
        if self._titled.title != value:
            self._titled.title = value
            self._dirty = True

    @property
    def sort_key(self) -> str | None:
        return self._titled.sort_key(self._language)

    @property
    def language(self) -> str | None:
        return self._language

    @language.setter
    def language(self, value: str | None) -> None:
        self._ensure_lists()
        if self._language != value:
            self._language = value
            self._titled.reset_sort_key()
            self._dirty = True

    @property
    def encoding(self) -> str:
        """The text encoding, detected through the plugin on first use if unknown."""
        if self._encoding is None:
            try:
                self.get_plugin().detect_language_and_encoding(self)
            except BookReadingError as exc:
                logger.debug("Encoding detection failed for %r: %s", self, exc)
            if self._encoding is None:
                self.encoding = DEFAULT_ENCODING
        return self._encoding  # type: ignore[return-value]

    @encoding.setter
    def encoding(self, value: str | None) -> None:
        self._ensure_lists()
        if self._encoding != value:
            self._encoding = value
            self._dirty = True

    @property
    def encoding_no_detection(self) -> str | None:
        return self._encoding

    @property
    def has_bookmark(self) -> bool:
        self._ensure_lists()
        return self._has_bookmark

    @has_bookmark.setter
    def has_bookmark(self, value: bool) -> None:
        self._ensure_lists()
        self._has_bookmark = value

    # --- Authors ---

    def authors(self) -> tuple[Author, ...]:
        self._ensure_lists()
        return tuple(self._authors)

    def add_author(self, author: Author | str | None, sort_key: str = "") -> None:
        """Add an author unless an equal one is already present.

        A plain name is trimmed; without a sort key the last word of the name
        becomes the key and the name is rewritten to end in that word.
        """
        if author is None:
            return
        if not isinstance(author, Author):
            name = author.strip()
            if not name:
                return
            key = (sort_key or "").strip()
            if not key:
                index = name.rfind(" ")
                if index == -1:
                    key = name
                else:
                    key = name[index + 1:]
                    name = f"{name[:index].rstrip(' ')} {key}"
            author = Author(name, key)

        self._ensure_lists()
        if author not in self._authors:
            self._authors.append(author)
            self._dirty = True

    def remove_all_authors(self) -> None:
        self._ensure_lists()
        if self._authors:
            self._authors = []
            self._dirty = True

    # --- Tags ---

    def tags(self) -> tuple[Tag, ...]:
        self._ensure_lists()
        return tuple(self._tags)

    def add_tag(self, tag: Tag | str | None) -> None:
        """Add a tag. Strings are read as slash-separated tag paths."""
        if isinstance(tag, str):
            tag = Tag.from_path(tag)
        if tag is None:
            return
        self._ensure_lists()
        if tag not in self._tags:
            self._tags.append(tag)
            self._dirty = True

    def remove_all_tags(self) -> None:
        self._ensure_lists()
        if self._tags:
            self._tags = []
            self._dirty = True

    # --- Labels ---

    def labels(self) -> tuple[str, ...]:
        self._ensure_lists()
        return tuple(self._labels)

    def add_label(self, label: str) -> None:
        label = label.strip()
        if not label:
            return
        self._ensure_lists()
        if label not in self._labels:
            self._labels.append(label)
            self._dirty = True

    def remove_label(self, label: str) -> None:
        label = label.strip()
        self._ensure_lists()
        if label in self._labels:
            self._labels.remove(label)
            self._dirty = True

    # --- Series ---

    @property
    def series_info(self) -> SeriesInfo | None:
        self._ensure_lists()
        return self._series_info

    def set_series_info(
        self, name: str | None, index: Decimal | str | float | int | None = None
    ) -> None:
        """Set or clear (``name=None``) the series. Marks dirty only on change."""
        self._ensure_lists()
        if name is not None:
            name = name.strip() or None
        current = self._series_info
        if name is None:
            if current is not None:
                self._series_info = None
                self._dirty = True
            return
        parsed = parse_series_index(index)
        if current is None or current.name != name or current.index != parsed:
            self._series_info = SeriesInfo(name, parsed)
            self._dirty = True

    # --- Identifiers ---

    def uids(self) -> tuple[UID, ...]:
        self._ensure_lists()
        return tuple(self._uids)

    def add_uid(self, uid: UID | str | None, uid_id: str | None = None) -> None:
        """Add an identifier, given either a UID or its type and id."""
        if isinstance(uid, str):
            if not uid_id or not uid_id.strip() or not uid.strip():
                return
            uid = UID(uid, uid_id)
        if uid is None:
            return
        self._ensure_lists()
        if uid not in self._uids:
            self._uids.append(uid)
            self._dirty = True

    def matches_uid(self, uid: UID) -> bool:
        return uid in self.uids()

    # --- Matching ---

    def matches(self, pattern: str) -> bool:
        """Case-insensitive substring match on title, series, authors, tags and file path."""
        needle = pattern.lower()

        def hit(text: str | None) -> bool:
            return text is not None and needle in text.lower()

        if hit(self.title):
            return True
        series = self.series_info
        if series is not None and hit(series.name):
            return True
        if any(hit(author.display_name) for author in self._authors):
            return True
        if any(hit(tag.name) for tag in self._tags):
            return True
        return hit(self.file.long_name)

    # --- Persistence ---

    def save(self, force: bool = False) -> bool:
        """Flush this book to the store in one transaction.

        Returns:
            True if anything was written, False if the book was already saved.

        Raises:
            sqlite3.Error: If the store fails; nothing is committed in that case.
        """
        if not force and self._id != -1 and not self._dirty:
            return False
        self._ensure_lists()
        database = self._require_database()

        with self._save_lock:
            if not force and self._id != -1 and not self._dirty:
                return False
            self._id = database.execute_as_transaction(lambda: self._write(database))
            self._dirty = False
        return True

    def _write(self, database: BooksDatabase) -> int:
        book_id = self._id
        title = self._titled.title or ""
        if book_id >= 0:
            database.update_book_info(book_id, self.file, self._encoding, self._language, title)
        else:
            book_id = database.insert_book_info(self.file, self._encoding, self._language, title)
            for link_id in sorted(self._visited_hyperlinks or ()):
                database.add_visited_hyperlink(book_id, link_id)

        database.delete_all_book_authors(book_id)
        for index, author in enumerate(self._authors):
            database.save_book_author_info(book_id, index, author)

        database.delete_all_book_tags(book_id)
        for tag in self._tags:
            database.save_book_tag_info(book_id, tag)

        stored_labels = database.list_labels(book_id)
        for label in stored_labels:
            if label not in self._labels:
                database.remove_label(book_id, label)
        for label in self._labels:
            if label not in stored_labels:
                database.set_label(book_id, label)

        database.save_book_series_info(book_id, self._series_info)

        database.delete_all_book_uids(book_id)
        for uid in self._uids:
            database.save_book_uid(book_id, uid)

        return book_id

    # --- Visited hyperlinks ---

    def _init_hyperlinks(self) -> set[str]:
        links = self._visited_hyperlinks
        if links is None:
            with self._hyperlink_lock:
                links = self._visited_hyperlinks
                if links is None:
                    links = set()
                    if self._id != -1 and self._database is not None:
                        links.update(self._database.load_visited_hyperlinks(self._id))
                    self._visited_hyperlinks = links
        return links

    def is_hyperlink_visited(self, link_id: str) -> bool:
        return link_id in self._init_hyperlinks()

    def mark_hyperlink_as_visited(self, link_id: str) -> None:
        """Record a visited link, appending it to the store right away if the book is saved."""
        links = self._init_hyperlinks()
        if link_id in links:
            return
        links.add(link_id)
        if self._id != -1 and self._database is not None:
            self._database.add_visited_hyperlink(self._id, link_id)

    # --- Cover ---

    def cover(self) -> CoverImage | None:
        """Return the decoded cover, or None if the file has none or cannot be decoded."""
        return self._cover.get(self._load_cover)

    def _load_cover(self) -> CoverImage | None:
        try:
            return self.get_plugin().read_cover(self.file)
        except BookReadingError as exc:
            logger.debug("No cover for %r: %s", self, exc)
            return None

    # --- Identity ---

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Book):
            return NotImplemented
        return self.file == other.file

    def __hash__(self) -> int:
        return hash(self.file)

    def __repr__(self) -> str:
        return f"Book[{self.file.long_name}, {self._id}]"

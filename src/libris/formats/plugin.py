# ABOUTME: FormatPlugin protocol and PluginCollection registry for metadata extractors.
# ABOUTME: Defines the extraction error hierarchy shared by every file format.

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from libris.book.book import Book
    from libris.book.types import BookFile, CoverImage


class BookReadingError(Exception):
    """Base class for failures reading metadata from a book file."""

    def __init__(self, message: str, file: BookFile | None = None) -> None:
        super().__init__(message)
        self.file = file


class ExtractorNotFound(BookReadingError):
    """Raised when no registered plugin handles a file."""


class ExtractionFailed(BookReadingError):
    """Raised when a plugin was found but could not read the file."""


@runtime_checkable
class FormatPlugin(Protocol):
    """Contract for file-format metadata extractors.

    Plugins populate a Book through its public mutators. They must not touch
    the Book's persistence; whether the result is dirty is the Book's call.
    """

    @property
    def name(self) -> str: ...

    def supports(self, file: BookFile) -> bool: ...

    def read_meta_info(self, book: Book) -> None: ...

    def read_uids(self, book: Book) -> None: ...

    def detect_language_and_encoding(self, book: Book) -> None: ...

    def read_cover(self, file: BookFile) -> CoverImage | None: ...


class PluginCollection:
    """Ordered registry of plugins. The first plugin that supports a file wins."""

    def __init__(self, plugins: list[FormatPlugin] | None = None) -> None:
        self._plugins: list[FormatPlugin] = list(plugins or [])

    def register(self, plugin: FormatPlugin) -> None:
        self._plugins.append(plugin)

    def get_plugin(self, file: BookFile) -> FormatPlugin | None:
        for plugin in self._plugins:
            if plugin.supports(file):
                return plugin
        return None

    def __iter__(self):
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)


_default: PluginCollection | None = None


def default_plugins() -> PluginCollection:
    """Return the process-wide collection with the built-in EPUB and text plugins."""
    global _default
    if _default is None:
        from libris.formats.epub import EpubPlugin
        from libris.formats.plaintext import PlainTextPlugin

        plugins = PluginCollection()
        plugins.register(EpubPlugin())
        plugins.register(PlainTextPlugin())
        _default = plugins
    return _default

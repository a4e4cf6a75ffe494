# ABOUTME: Shared pytest fixtures for Libris tests.
# ABOUTME: Provides EPUB/text sample files, a temporary BooksDatabase and a scriptable fake plugin.

from pathlib import Path

import pytest
from ebooklib import epub

from libris.book.types import BookFile, CoverImage
from libris.db.connection import open_library
from libris.db.database import BooksDatabase
from libris.formats.plugin import ExtractionFailed, PluginCollection


class FakePlugin:
    """A FormatPlugin whose output is configured by the test.

    Handles files with the ``.fake`` extension; the files need not exist.
    """

    name = "fake"

    def __init__(self) -> None:
        self.title: str | None = "Sample"
        self.language: str | None = "en"
        self.detected_encoding: str | None = None
        self.authors: list[tuple[str, str]] = [("Jane Q. Public", "")]
        self.tags: list[str] = []
        self.series: tuple[str, str | None] | None = None
        self.meta_uids: list[tuple[str, str]] = []
        self.explicit_uids: list[tuple[str, str]] = []
        self.fail = False
        self.cover: CoverImage | None = None
        self.cover_fails = False
        self.read_meta_calls = 0
        self.read_uids_calls = 0
        self.cover_calls = 0

    def supports(self, file: BookFile) -> bool:
        return file.extension == ".fake"

    def read_meta_info(self, book) -> None:
        self.read_meta_calls += 1
        if self.fail:
            raise ExtractionFailed("cannot parse", book.file)
        if self.title:
            book.title = self.title
        if self.language:
            book.language = self.language
        for name, sort_key in self.authors:
            book.add_author(name, sort_key)
        for tag in self.tags:
            book.add_tag(tag)
        if self.series:
            book.set_series_info(*self.series)
        for uid_type, uid_id in self.meta_uids:
            book.add_uid(uid_type, uid_id)

    def read_uids(self, book) -> None:
        self.read_uids_calls += 1
        if self.fail:
            raise ExtractionFailed("cannot parse", book.file)
        for uid_type, uid_id in self.explicit_uids:
            book.add_uid(uid_type, uid_id)

    def detect_language_and_encoding(self, book) -> None:
        if self.detected_encoding:
            book.encoding = self.detected_encoding

    def read_cover(self, file: BookFile) -> CoverImage | None:
        self.cover_calls += 1
        if self.cover_fails:
            raise ExtractionFailed("bad image", file)
        return self.cover


@pytest.fixture
def fake_plugin() -> FakePlugin:
    return FakePlugin()


@pytest.fixture
def plugins(fake_plugin: FakePlugin) -> PluginCollection:
    return PluginCollection([fake_plugin])


@pytest.fixture
def fake_file(tmp_path: Path) -> BookFile:
    """A BookFile handled by FakePlugin."""
    return BookFile.from_path(tmp_path / "sample.fake")


@pytest.fixture
def database(tmp_path: Path) -> BooksDatabase:
    """A BooksDatabase backed by a temporary SQLite file."""
    db = BooksDatabase(open_library(tmp_path / "test.db"))
    yield db
    db.close()


def _write_epub(path: Path, *, title: str, with_cover: bool = False) -> Path:
    book = epub.EpubBook()
    book.set_identifier("9780156001311")
    book.set_title(title)
    book.set_language("en")
    book.add_author("Umberto Eco")
    book.add_metadata("DC", "subject", "Fiction/Mystery")
    book.add_metadata("DC", "subject", "Historical")

    if with_cover:
        book.set_cover("cover.jpg", b"\xff\xd8\xff\xe0fake-jpeg-data")

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """A valid EPUB with title, author, language, ISBN and two subjects."""
    return _write_epub(tmp_path / "name_of_the_rose.epub", title="The Name of the Rose")


@pytest.fixture
def cover_epub(tmp_path: Path) -> Path:
    """Like sample_epub, with an embedded cover image."""
    return _write_epub(tmp_path / "with_cover.epub", title="Covered", with_cover=True)


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file with an .epub extension that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def sample_text(tmp_path: Path) -> Path:
    """A UTF-8 plain-text book."""
    filepath = tmp_path / "war.and.peace.txt"
    filepath.write_text("Well, Prince, so Genoa and Lucca are now just family estates.\n")
    return filepath

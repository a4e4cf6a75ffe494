# ABOUTME: Unit tests for the Book aggregate without a database.
# ABOUTME: Covers construction from files, dirty tracking, deduplicating mutators, matching and identity.

from pathlib import Path

import pytest

from libris.book.book import Book
from libris.book.hooks import DemoContentHook
from libris.book.types import UID, Author, BookFile, CoverImage, SeriesInfo, Tag
from libris.formats.plugin import ExtractionFailed, ExtractorNotFound, PluginCollection


@pytest.fixture
def book(fake_file: BookFile, plugins: PluginCollection) -> Book:
    return Book.from_file(fake_file, plugins=plugins)


def clean(book: Book) -> Book:
    """Pretend the book was just saved."""
    book._dirty = False
    return book


class TestFromFile:
    """Tests for Book.from_file()."""

    def test_reads_metadata_from_plugin(self, book: Book) -> None:
        assert book.id == -1
        assert book.dirty
        assert book.title == "Sample"
        assert book.language == "en"
        assert book.authors() == (Author("Jane Q. Public", "Public"),)

    def test_no_plugin_raises(self, tmp_path: Path, plugins: PluginCollection) -> None:
        with pytest.raises(ExtractorNotFound):
            Book.from_file(BookFile.from_path(tmp_path / "book.pdf"), plugins=plugins)

    def test_extraction_failure_propagates(self, fake_file, fake_plugin, plugins) -> None:
        fake_plugin.fail = True
        with pytest.raises(ExtractionFailed):
            Book.from_file(fake_file, plugins=plugins)

    def test_title_falls_back_to_file_name(self, tmp_path, fake_plugin, plugins) -> None:
        fake_plugin.title = None
        book = Book.from_file(BookFile.from_path(tmp_path / "my.great.book.fake"), plugins=plugins)
        assert book.title == "my.great.book"

    def test_uids_read_explicitly_when_metadata_has_none(self, fake_file, fake_plugin, plugins) -> None:
        fake_plugin.explicit_uids = [("SHA-256", "abc")]
        book = Book.from_file(fake_file, plugins=plugins)
        assert fake_plugin.read_uids_calls == 1
        assert book.uids() == (UID("SHA-256", "abc"),)

    def test_uids_not_reread_when_metadata_has_some(self, fake_file, fake_plugin, plugins) -> None:
        fake_plugin.meta_uids = [("ISBN", "9780156001311")]
        fake_plugin.explicit_uids = [("SHA-256", "abc")]
        book = Book.from_file(fake_file, plugins=plugins)
        assert fake_plugin.read_uids_calls == 0
        assert book.uids() == (UID("ISBN", "9780156001311"),)

    def test_demo_hook_marks_demo_books(self, tmp_path, plugins) -> None:
        demo_dir = tmp_path / "Books" / "Demos"
        file = BookFile.from_path(demo_dir / "intro.fake")
        book = Book.from_file(file, plugins=plugins, hooks=[DemoContentHook(demo_dir)])
        assert book.title == "Sample (demo)"
        assert Tag("demo") in book.tags()

    def test_demo_hook_ignores_other_books(self, tmp_path, fake_file, plugins) -> None:
        hook = DemoContentHook(tmp_path / "Books" / "Demos")
        book = Book.from_file(fake_file, plugins=plugins, hooks=[hook])
        assert book.title == "Sample"
        assert book.tags() == ()


class TestReload:
    """Tests for Book.reload_info_from_file()."""

    def test_reload_picks_up_new_metadata(self, book, fake_plugin) -> None:
        fake_plugin.title = "Second Edition"
        assert book.reload_info_from_file() is True
        assert book.title == "Second Edition"

    def test_failed_reload_keeps_previous_state(self, book, fake_plugin) -> None:
        book.add_tag("keep-me")
        clean(book)
        fake_plugin.fail = True
        assert book.reload_info_from_file() is False
        assert book.title == "Sample"
        assert book.tags() == (Tag("keep-me"),)
        assert book.authors() == (Author("Jane Q. Public", "Public"),)
        assert not book.dirty

    def test_reload_keeps_labels(self, book) -> None:
        book.add_label("favorite")
        book.reload_info_from_file()
        assert book.labels() == ("favorite",)


class TestDirtyTracking:
    """Setting a field to its current value never marks the book dirty."""

    @pytest.mark.parametrize(
        ("field", "same", "different"),
        [
            ("title", "Sample", "Other"),
            ("language", "en", "fr"),
            ("encoding", None, "utf-8"),
        ],
    )
    def test_scalar_setters(self, book: Book, field, same, different) -> None:
        clean(book)
        setattr(book, field, same)
        assert not book.dirty
        setattr(book, field, different)
        assert book.dirty

    def test_language_change_resets_sort_key(self, book: Book) -> None:
        book.title = "Die Blechtrommel"
        assert book.sort_key == "die blechtrommel"
        book.language = "de"
        assert book.sort_key == "blechtrommel"


class TestAuthors:
    """Tests for add_author() normalization and deduplication."""

    def test_sort_key_derived_from_last_word(self, book: Book) -> None:
        book.remove_all_authors()
        book.add_author("  Umberto    Eco ")
        assert book.authors() == (Author("Umberto Eco", "Eco"),)

    def test_single_word_name_is_its_own_key(self, book: Book) -> None:
        book.add_author("Homer")
        assert Author("Homer", "Homer") in book.authors()

    def test_explicit_sort_key_kept(self, book: Book) -> None:
        book.add_author("Umberto Eco", "Eco, Umberto")
        assert book.authors()[-1] == Author("Umberto Eco", "Eco, Umberto")

    def test_blank_name_is_ignored(self, book: Book) -> None:
        clean(book)
        book.add_author("   ")
        book.add_author(None)
        assert not book.dirty
        assert len(book.authors()) == 1

    def test_duplicate_not_added(self, book: Book) -> None:
        clean(book)
        book.add_author("Jane Q. Public")
        assert not book.dirty
        assert len(book.authors()) == 1

    def test_insertion_order_kept(self, book: Book) -> None:
        book.add_author("Alan Turing")
        book.add_author(Author("Ada Lovelace", "Lovelace"))
        assert [a.sort_key for a in book.authors()] == ["Public", "Turing", "Lovelace"]

    def test_remove_all_marks_dirty_only_when_non_empty(self, book: Book) -> None:
        clean(book)
        book.remove_all_authors()
        assert book.dirty
        clean(book)
        book.remove_all_authors()
        assert not book.dirty

    def test_views_are_read_only(self, book: Book) -> None:
        view = book.authors()
        with pytest.raises(AttributeError):
            view.append(Author("X", "X"))  # type: ignore[attr-defined]


class TestTagsLabelsUids:
    """Tests for tag, label and uid mutators."""

    def test_add_tag_dedups(self, book: Book) -> None:
        book.add_tag("Fiction/Mystery")
        clean(book)
        book.add_tag(Tag("Mystery", Tag("Fiction")))
        assert not book.dirty
        assert book.tags() == (Tag("Mystery", Tag("Fiction")),)

    def test_remove_all_tags(self, book: Book) -> None:
        book.add_tag("a")
        clean(book)
        book.remove_all_tags()
        assert book.dirty
        assert book.tags() == ()

    def test_labels_have_set_semantics(self, book: Book) -> None:
        book.add_label("read")
        book.add_label("favorite")
        clean(book)
        book.add_label("read")
        assert not book.dirty
        assert book.labels() == ("read", "favorite")

    def test_remove_label(self, book: Book) -> None:
        book.add_label("read")
        clean(book)
        book.remove_label("unknown")
        assert not book.dirty
        book.remove_label("read")
        assert book.dirty
        assert book.labels() == ()

    def test_remove_label_strips_whitespace(self, book: Book) -> None:
        book.add_label(" to-read ")
        assert book.labels() == ("to-read",)
        book.remove_label(" to-read ")
        assert book.labels() == ()

    def test_add_uid_dedups(self, book: Book) -> None:
        book.add_uid("ISBN", "123")
        clean(book)
        book.add_uid(UID("ISBN", "123"))
        assert not book.dirty
        assert book.matches_uid(UID("ISBN", "123"))
        assert not book.matches_uid(UID("ISBN", "456"))

    def test_add_uid_without_id_ignored(self, book: Book) -> None:
        book.add_uid("ISBN", "  ")
        assert book.uids() == ()


class TestSeries:
    """Tests for set_series_info()."""

    def test_set_then_same_is_noop(self, book: Book) -> None:
        book.set_series_info("Dune", "1")
        assert book.series_info == SeriesInfo("Dune", 1)
        clean(book)
        book.set_series_info("Dune", 1)
        assert not book.dirty

    def test_index_change_marks_dirty(self, book: Book) -> None:
        book.set_series_info("Dune", "1")
        clean(book)
        book.set_series_info("Dune", "2")
        assert book.dirty

    def test_none_clears(self, book: Book) -> None:
        book.set_series_info("Dune", None)
        clean(book)
        book.set_series_info(None, "3")
        assert book.dirty
        assert book.series_info is None

    def test_clearing_absent_series_is_noop(self, book: Book) -> None:
        clean(book)
        book.set_series_info(None)
        assert not book.dirty

    def test_blank_name_means_no_series(self, book: Book) -> None:
        book.set_series_info("  ", "1")
        assert book.series_info is None


class TestMatches:
    """Tests for matches()."""

    def test_title_case_insensitive(self, book: Book) -> None:
        assert book.matches("sample")
        assert book.matches("AMP")

    def test_series(self, book: Book) -> None:
        book.set_series_info("Foundation", 1)
        assert book.matches("foundation")

    def test_author(self, book: Book) -> None:
        assert book.matches("q. pub")

    def test_tag(self, book: Book) -> None:
        book.add_tag("Speculative")
        assert book.matches("speculative")

    def test_file_path(self, book: Book) -> None:
        assert book.matches("sample.fake")

    def test_uids_are_not_matched(self, book: Book) -> None:
        book.add_uid("ISBN", "9780156001311")
        assert not book.matches("97801560")


class TestIdentity:
    """Books are equal iff their files are."""

    def test_equal_regardless_of_id_and_metadata(self, fake_file, plugins) -> None:
        a = Book.from_file(fake_file, plugins=plugins)
        b = Book(fake_file, book_id=7, title="Different", plugins=plugins)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_files_differ(self, tmp_path, plugins) -> None:
        a = Book.from_file(BookFile.from_path(tmp_path / "a.fake"), plugins=plugins)
        b = Book.from_file(BookFile.from_path(tmp_path / "b.fake"), plugins=plugins)
        assert a != b

    def test_repr(self, book: Book) -> None:
        assert repr(book) == f"Book[{book.file.long_name}, -1]"


class TestEncodingAndCover:
    """Tests for encoding detection and cover lookup."""

    def test_encoding_detected_by_plugin(self, book: Book, fake_plugin) -> None:
        fake_plugin.detected_encoding = "koi8-r"
        assert book.encoding == "koi8-r"

    def test_encoding_defaults_to_utf8(self, book: Book) -> None:
        assert book.encoding_no_detection is None
        assert book.encoding == "utf-8"

    def test_cover_returned_and_cached(self, book: Book, fake_plugin) -> None:
        fake_plugin.cover = CoverImage(b"png", "image/png")
        assert book.cover() is fake_plugin.cover
        assert book.cover() is fake_plugin.cover
        assert fake_plugin.cover_calls == 1

    def test_cover_decode_failure_is_absent_and_not_retried(self, book, fake_plugin) -> None:
        fake_plugin.cover_fails = True
        assert book.cover() is None
        assert book.cover() is None
        assert fake_plugin.cover_calls == 1


class TestHyperlinksWithoutDatabase:
    """Visited links on an unsaved book are kept in memory."""

    def test_mark_and_query(self, book: Book) -> None:
        assert not book.is_hyperlink_visited("ch1")
        book.mark_hyperlink_as_visited("ch1")
        book.mark_hyperlink_as_visited("ch1")
        assert book.is_hyperlink_visited("ch1")
        assert not book.is_hyperlink_visited("ch2")

    def test_save_without_database_raises(self, book: Book) -> None:
        with pytest.raises(ValueError, match="not attached"):
            book.save()

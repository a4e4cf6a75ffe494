# ABOUTME: Title plus lazily computed sort key, embedded in entities that need sorting by title.
# ABOUTME: The sort key drops a leading article for English titles and is case-folded.

_ARTICLES = {
    "en": ("the ", "a ", "an "),
    "de": ("der ", "die ", "das ", "ein ", "eine "),
    "fr": ("le ", "la ", "les ", "l'", "un ", "une "),
}


def compute_sort_key(title: str | None, language: str | None) -> str | None:
    """Return the sort key for a title in a given language.

    Unknown languages are treated as English.
    """
    if title is None:
        return None
    key = " ".join(title.split()).lower()
    lang = (language or "en").split("-")[0].lower()
    for article in _ARTICLES.get(lang, _ARTICLES["en"]):
        if key.startswith(article) and len(key) > len(article):
            return key[len(article):]
    return key


class SortableTitle:
    """A title with a cached sort key that is recomputed after reset_sort_key()."""

    def __init__(self, title: str | None = None) -> None:
        self._title = title
        self._sort_key: str | None = None

    @property
    def title(self) -> str | None:
        return self._title

    @title.setter
    def title(self, value: str | None) -> None:
        self._title = value
        self._sort_key = None

    def is_empty(self) -> bool:
        return not self._title

    def sort_key(self, language: str | None) -> str | None:
        if self._sort_key is None:
            self._sort_key = compute_sort_key(self._title, language)
        return self._sort_key

    def reset_sort_key(self) -> None:
        self._sort_key = None

# ABOUTME: Value objects attached to a Book: authors, tags, series, uids, file identity, covers.
# ABOUTME: All are immutable and compare by value so they can be deduplicated in ordered lists.

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

FAVORITE_LABEL = "favorite"
READ_LABEL = "read"


@dataclass(frozen=True)
class Author:
    """A book author: the name shown to users plus the key used for sorting."""

    display_name: str
    sort_key: str

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class Tag:
    """A hierarchical tag. ``parent`` is None for top-level tags."""

    name: str
    parent: "Tag | None" = None

    @property
    def full_name(self) -> str:
        """Slash-joined path from the root tag, e.g. ``Fiction/Mystery``."""
        if self.parent is None:
            return self.name
        return f"{self.parent.full_name}/{self.name}"

    @classmethod
    def from_path(cls, path: str) -> "Tag | None":
        """Build a tag chain from a slash-separated path. Empty segments are skipped."""
        tag: Tag | None = None
        for segment in path.split("/"):
            segment = segment.strip()
            if segment:
                tag = cls(segment, tag)
        return tag

    def __str__(self) -> str:
        return self.full_name


def parse_series_index(value: "Decimal | str | float | int | None") -> Decimal | None:
    """Normalize a series index to a Decimal, or None when missing or unparsable."""
    if value is None or isinstance(value, Decimal):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


@dataclass(frozen=True)
class SeriesInfo:
    """A series name with the book's (optional) position in it."""

    name: str
    index: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("series name must not be empty")

    def __str__(self) -> str:
        if self.index is None:
            return self.name
        return f"{self.name} #{self.index.normalize():f}"


@dataclass(frozen=True)
class UID:
    """An external identifier such as an ISBN, a UUID or a file hash."""

    type: str
    id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", self.type.strip())
        object.__setattr__(self, "id", self.id.strip())

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class BookFile:
    """Identity of the file backing a Book. Two BookFiles are equal iff their paths are."""

    path: Path

    @classmethod
    def from_path(cls, path: Path | str) -> "BookFile":
        return cls(Path(path).expanduser().absolute())

    @property
    def short_name(self) -> str:
        return self.path.name

    @property
    def long_name(self) -> str:
        return str(self.path)

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    def is_under(self, directory: Path) -> bool:
        """Whether this file lives somewhere below ``directory``."""
        return self.path.is_relative_to(directory.expanduser().absolute())

    def __str__(self) -> str:
        return self.long_name


@dataclass(eq=False)
class CoverImage:
    """Decoded cover image bytes. Held weakly by the cover cache."""

    data: bytes
    media_type: str = field(default="image/jpeg")

    def __len__(self) -> int:
        return len(self.data)

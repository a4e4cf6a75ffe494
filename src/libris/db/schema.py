# ABOUTME: SQL DDL statements for the Libris book database schema.
# ABOUTME: Defines book rows plus the author, tag, label, series, uid and hyperlink tables.

SCHEMA_V1 = """
-- One row per book file
CREATE TABLE books (
    book_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    file_path     TEXT NOT NULL,
    title         TEXT NOT NULL,
    encoding      TEXT,
    language      TEXT,
    date_added    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_modified TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE UNIQUE INDEX idx_books_file_path ON books(file_path);

CREATE TABLE authors (
    author_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL,
    sort_key  TEXT NOT NULL,
    UNIQUE (name, sort_key)
);

CREATE TABLE book_author (
    book_id      INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    author_id    INTEGER NOT NULL REFERENCES authors(author_id),
    author_index INTEGER NOT NULL,
    PRIMARY KEY (book_id, author_id)
);

-- Tags form a tree; top-level tags have a NULL parent
CREATE TABLE tags (
    tag_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL,
    parent_id INTEGER REFERENCES tags(tag_id)
);

CREATE INDEX idx_tags_name ON tags(name);

CREATE TABLE book_tag (
    book_id INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    tag_id  INTEGER NOT NULL REFERENCES tags(tag_id),
    PRIMARY KEY (book_id, tag_id)
);

CREATE TABLE labels (
    label_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name     TEXT NOT NULL UNIQUE
);

CREATE TABLE book_label (
    book_id  INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    label_id INTEGER NOT NULL REFERENCES labels(label_id),
    PRIMARY KEY (book_id, label_id)
);

CREATE TABLE series (
    series_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL UNIQUE
);

-- book_index is TEXT so decimal indexes like 1.50 round-trip exactly
CREATE TABLE book_series (
    book_id    INTEGER PRIMARY KEY REFERENCES books(book_id) ON DELETE CASCADE,
    series_id  INTEGER NOT NULL REFERENCES series(series_id),
    book_index TEXT
);

CREATE TABLE book_uid (
    book_id INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    type    TEXT NOT NULL,
    uid     TEXT NOT NULL,
    PRIMARY KEY (book_id, type, uid)
);

CREATE TABLE visited_hyperlinks (
    book_id      INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    hyperlink_id TEXT NOT NULL,
    PRIMARY KEY (book_id, hyperlink_id)
);

CREATE TABLE bookmarks (
    bookmark_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id       INTEGER NOT NULL REFERENCES books(book_id) ON DELETE CASCADE,
    text          TEXT NOT NULL DEFAULT '',
    visible       INTEGER NOT NULL DEFAULT 1,
    creation_time TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_bookmarks_book ON bookmarks(book_id);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# Ordered (version, script) pairs applied on top of SCHEMA_V1.
MIGRATIONS: list[tuple[int, str]] = []

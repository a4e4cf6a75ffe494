# ABOUTME: Libris - book metadata reconciled between files, a SQLite store, and user edits.
# ABOUTME: See libris.book for the Book aggregate and libris.core for the collection service.

# ABOUTME: SHA-256 content hashing used as a last-resort derived identifier for book files.
# ABOUTME: Reads files in chunks so large books are never loaded whole into memory.

import hashlib
from pathlib import Path

from libris.book.types import UID

HASH_UID_TYPE = "SHA-256"

_CHUNK_SIZE = 65536  # 64 KB


def compute_file_hash(path: Path) -> str:
    """Compute the lowercase hex SHA-256 digest of a file.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(_CHUNK_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def file_hash_uid(path: Path) -> UID:
    """Wrap the file's digest in a UID."""
    return UID(HASH_UID_TYPE, compute_file_hash(path))

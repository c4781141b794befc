"""Locating and opening TagStudio libraries."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from tagstudio_db.errors import LibraryNotFoundError
from tagstudio_db.pool import ConnectionPool

logger = logging.getLogger(__name__)

_DB_DIR = ".TagStudio"
_DB_FILE = "ts_library.sqlite"


def is_folder_library_root(path) -> bool:
    """Whether ``path`` holds ``.TagStudio/ts_library.sqlite``.

    Raises OSError when existence cannot be determined.
    """
    target = Path(path) / _DB_DIR / _DB_FILE
    try:
        os.stat(target)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


def get_library_root(path) -> Path | None:
    """Find the nearest folder, from ``path`` upwards, that is a library root."""
    current = Path(path)
    while not is_folder_library_root(current):
        parent = current.parent
        if parent == current:
            return None
        current = parent
    return current


@dataclass
class Library:
    """A TagStudio library: its root folder and its database pool."""

    path: Path
    db: ConnectionPool

    @classmethod
    def open(cls, path) -> Library:
        """Open the library that contains ``path``."""
        root = get_library_root(path)
        if root is None:
            raise LibraryNotFoundError()
        db_path = root / _DB_DIR / _DB_FILE
        logger.debug("Opening DB `%s`", db_path)
        return cls(path=root, db=ConnectionPool(str(db_path)))

    @classmethod
    def in_memory(cls) -> Library:
        """Create a library backed by an in-memory database."""
        return cls(path=Path(""), db=ConnectionPool(":memory:"))

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> Library:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
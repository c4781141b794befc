"""Root folders of a library."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass


@dataclass
class Folder:
    """A root folder of the library."""

    id: int
    path: str
    """The full path of the folder."""
    uuid: str

    @classmethod
    def find_by_id(cls, conn: sqlite3.Connection, folder_id: int) -> Folder | None:
        """Get the folder with the given id, or None."""
        row = conn.execute(
            "SELECT * FROM `folders` WHERE `id` = ?", (folder_id,)
        ).fetchone()
        if row is None:
            return None
        return cls(id=row["id"], path=row["path"], uuid=row["uuid"])
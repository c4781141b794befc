"""Alternative names of tags."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class TagAlias:
    """An alternative name under which a tag can be found."""

    id: int
    name: str
    tag_id: int

    @classmethod
    def _from_row(cls, row: sqlite3.Row) -> TagAlias:
        return cls(id=row["id"], name=row["name"], tag_id=row["tag_id"])

    @classmethod
    def find_by_name(cls, conn: sqlite3.Connection, name: str, tag_id: int) -> list[TagAlias]:
        """Fetch the aliases of a tag with the given name.

        A list is returned since the database does not enforce uniqueness.
        """
        rows = conn.execute(
            "SELECT * FROM `tag_aliases` WHERE `name` = ? AND `tag_id` = ?",
            (name, tag_id),
        )
        return [cls._from_row(row) for row in rows]

    @classmethod
    def insert(cls, conn: sqlite3.Connection, name: str, tag_id: int) -> bool:
        """Add an alias to a tag unless it is empty or already present.

        Returns whether a row was inserted.
        """
        if not name:
            return False
        if cls.find_by_name(conn, name, tag_id):
            logger.debug("Ignoring alias addition %s", name)
            return False
        logger.debug("Adding Alias `%s` to tag `%s`", name, tag_id)
        conn.execute(
            "INSERT INTO `tag_aliases` VALUES (NULL, ?, ?)",
            (name, tag_id),
        )
        return True
"""Tags and their relations to aliases, parents and children."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator

from tagstudio_db.alias import TagAlias

logger = logging.getLogger(__name__)

_NAME_MATCH = """
    LOWER(`tags`.`name`) = LOWER(:name) OR
    LOWER(`tags`.`name`) = replace(LOWER(:name), '_', ' ') OR
    LOWER(`tags`.`shorthand`) = LOWER(:name) OR
    LOWER(`tags`.`shorthand`) = replace(LOWER(:name), '_', ' ') OR
    LOWER(`tag_aliases`.`name`) = LOWER(:name) OR
    LOWER(`tag_aliases`.`name`) = replace(LOWER(:name), '_', ' ')
"""


@contextmanager
def _transaction(conn: sqlite3.Connection) -> Iterator[None]:
    """Run a block atomically; nests through savepoints."""
    name = f"sp_{uuid.uuid4().hex}"
    conn.execute(f"SAVEPOINT {name}")
    try:
        yield
    except BaseException:
        conn.execute(f"ROLLBACK TO {name}")
        conn.execute(f"RELEASE {name}")
        raise
    conn.execute(f"RELEASE {name}")


@dataclass
class Tag:
    """A tag row. ``Tag("name")`` builds a tag that is not yet stored."""

    name: str
    id: int = 0
    shorthand: str | None = None
    color_namespace: str | None = None
    color_slug: str | None = None
    is_category: bool = False
    icon: str | None = None
    disambiguation_id: int | None = None

    @classmethod
    def _from_row(cls, row: sqlite3.Row) -> Tag:
        return cls(
            id=row["id"],
            name=row["name"],
            shorthand=row["shorthand"],
            color_namespace=row["color_namespace"],
            color_slug=row["color_slug"],
            is_category=bool(row["is_category"]),
            icon=row["icon"],
            disambiguation_id=row["disambiguation_id"],
        )

    @classmethod
    def find_by_id(cls, conn: sqlite3.Connection, tag_id: int) -> Tag | None:
        """Get the tag with the given id, or None."""
        row = conn.execute("SELECT * FROM `tags` WHERE `id` = ?", (tag_id,)).fetchone()
        return None if row is None else cls._from_row(row)

    @classmethod
    def find_by_exact_name(cls, conn: sqlite3.Connection, name: str) -> list[Tag]:
        """Get the tags whose name is exactly ``name``."""
        rows = conn.execute("SELECT * FROM `tags` WHERE `name` = ?", (name,))
        return [cls._from_row(row) for row in rows]

    @classmethod
    def find_by_name(cls, conn: sqlite3.Connection, name: str) -> list[Tag]:
        """Get tags by name, shorthand or alias, ignoring case.

        Underscores in ``name`` also match spaces.
        """
        logger.debug("Searching tag `%s` by name", name)
        rows = conn.execute(
            "SELECT `tags`.* FROM `tags` "
            "LEFT JOIN `tag_aliases` ON `tags`.`id` = `tag_aliases`.`tag_id` "
            f"WHERE {_NAME_MATCH}",
            {"name": name},
        )
        return [cls._from_row(row) for row in rows]

    @classmethod
    def get_by_name_or_insert_new(cls, conn: sqlite3.Connection, name: str) -> list[Tag]:
        """Find tags matching ``name``, creating one if none exist."""
        tags = cls.find_by_name(conn, name)
        if tags:
            return tags
        return [cls(name).insert(conn)]

    def insert(self, conn: sqlite3.Connection) -> Tag:
        """Store this tag as a new row and return the stored tag."""
        logger.debug("Adding tag `%s`", self.name)
        cursor = conn.execute(
            "INSERT INTO `tags` VALUES (NULL, ?, ?, ?, ?, ?, ?, ?)",
            (
                self.name,
                self.shorthand,
                self.color_namespace,
                self.color_slug,
                self.is_category,
                self.icon,
                self.disambiguation_id,
            ),
        )
        stored = type(self).find_by_id(conn, cursor.lastrowid)
        if stored is None:
            raise sqlite3.DatabaseError("inserted tag could not be read back")
        return stored

    def rename(self, conn: sqlite3.Connection, new_name: str, no_aliasing: bool = False) -> None:
        """Rename the tag, also recording ``new_name`` as an alias unless disabled.

        The object is only changed once the database update succeeded.
        """
        with _transaction(conn):
            if not no_aliasing:
                self.add_alias(conn, new_name)
            conn.execute(
                "UPDATE `tags` SET name = ? WHERE id = ?", (new_name, self.id)
            )
        self.name = new_name

    def merge_tag(self, conn: sqlite3.Connection, other: Tag) -> None:
        """Merge ``other`` into this tag and delete it."""
        with _transaction(conn):
            self.add_alias(conn, other.name)
            self.add_alias(conn, other.shorthand or "")
            for alias in list(other.get_aliases(conn)):
                self.add_alias(conn, alias.name)
            for parent in list(other.get_parents(conn)):
                self.add_parent(conn, parent.id)
            for child in list(other.get_children(conn)):
                self.add_child(conn, child.id)
            other.delete(conn)

    def get_aliases(self, conn: sqlite3.Connection) -> Iterator[TagAlias]:
        rows = conn.execute(
            "SELECT `tag_aliases`.* FROM `tags` "
            "INNER JOIN `tag_aliases` ON `tag_aliases`.`tag_id` = `tags`.`id` "
            "WHERE `tags`.`id` = ?",
            (self.id,),
        )
        for row in rows:
            yield TagAlias(id=row["id"], name=row["name"], tag_id=row["tag_id"])

    def get_parents(self, conn: sqlite3.Connection) -> Iterator[Tag]:
        rows = conn.execute(
            "SELECT `tags`.* FROM `tags` "
            "INNER JOIN `tag_parents` ON `tag_parents`.`child_id` = `tags`.`id` "
            "WHERE `tag_parents`.`parent_id` = ?",
            (self.id,),
        )
        for row in rows:
            yield Tag._from_row(row)

    def get_children(self, conn: sqlite3.Connection) -> Iterator[Tag]:
        rows = conn.execute(
            "SELECT `tags`.* FROM `tags` "
            "INNER JOIN `tag_parents` ON `tag_parents`.`parent_id` = `tags`.`id` "
            "WHERE `tag_parents`.`child_id` = ?",
            (self.id,),
        )
        for row in rows:
            yield Tag._from_row(row)

    def add_alias(self, conn: sqlite3.Connection, name: str) -> None:
        """Add an alias, skipping duplicates and the tag's own name."""
        if self.name == name:
            logger.debug("Ignoring alias addition %s", name)
            return
        TagAlias.insert(conn, name, self.id)

    def add_parent(self, conn: sqlite3.Connection, parent_id: int) -> None:
        logger.debug("Adding parent `%s` to tag `%s` (%s)", parent_id, self.name, self.id)
        conn.execute(
            "INSERT OR IGNORE INTO `tag_parents`(parent_id, child_id) VALUES (?, ?)",
            (self.id, parent_id),
        )

    def add_parents(self, conn: sqlite3.Connection, tags: Iterable[Tag]) -> None:
        with _transaction(conn):
            for tag in tags:
                self.add_parent(conn, tag.id)

    def add_child(self, conn: sqlite3.Connection, child_id: int) -> None:
        logger.debug("Adding child `%s` to tag `%s` (%s)", child_id, self.name, self.id)
        conn.execute(
            "INSERT OR IGNORE INTO `tag_parents`(parent_id, child_id) VALUES (?, ?)",
            (child_id, self.id),
        )

    def add_children(self, conn: sqlite3.Connection, tags: Iterable[Tag]) -> None:
        with _transaction(conn):
            for tag in tags:
                self.add_child(conn, tag.id)

    def delete(self, conn: sqlite3.Connection) -> None:
        """Remove the tag with its aliases, entry links and relations."""
        with _transaction(conn):
            conn.execute("DELETE FROM `tag_aliases` WHERE `tag_id` = ?", (self.id,))
            conn.execute("DELETE FROM `tag_entries` WHERE `tag_id` = ?", (self.id,))
            conn.execute(
                "DELETE FROM `tag_parents` WHERE `parent_id` = ? OR `child_id` = ?",
                (self.id, self.id),
            )
            conn.execute("DELETE FROM `tags` WHERE `id` = ?", (self.id,))
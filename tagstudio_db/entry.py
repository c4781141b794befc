"""Library entries, the files a library tracks, and their text fields."""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator

from tagstudio_db.errors import PathNotInFolderError, TagStudioError
from tagstudio_db.folder import Folder
from tagstudio_db.tag import Tag, _transaction

if TYPE_CHECKING:
    from tagstudio_db.query import QueryFragment

logger = logging.getLogger(__name__)

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M",
)


def _parse_datetime(value) -> datetime | None:
    """Decode a stored DATETIME column into a naive datetime."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, timezone.utc).replace(tzinfo=None)
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            raise ValueError(f"invalid datetime value {value!r}") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@dataclass
class Entry:
    """A file tracked by the library."""

    id: int
    folder_id: int
    path: str
    filename: str
    suffix: str
    date_created: datetime | None = None
    date_modified: datetime | None = None
    date_added: datetime | None = None

    @classmethod
    def _from_row(cls, row: sqlite3.Row) -> Entry:
        return cls(
            id=row["id"],
            folder_id=row["folder_id"],
            path=row["path"],
            filename=row["filename"],
            suffix=row["suffix"],
            date_created=_parse_datetime(row["date_created"]),
            date_modified=_parse_datetime(row["date_modified"]),
            date_added=_parse_datetime(row["date_added"]),
        )

    @classmethod
    def find_by_id(cls, conn: sqlite3.Connection, entry_id: int) -> Entry | None:
        """Get the entry with the given id, or None."""
        row = conn.execute(
            "SELECT * FROM `entries` WHERE `id` = ?", (entry_id,)
        ).fetchone()
        return None if row is None else cls._from_row(row)

    @classmethod
    def find_by_path(cls, conn: sqlite3.Connection, path) -> list[Entry]:
        """Get the entries stored under a path relative to their folder."""
        rows = conn.execute(
            "SELECT `entries`.* FROM `entries` WHERE `entries`.`path` = ?",
            (str(path),),
        )
        return [cls._from_row(row) for row in rows]

    @classmethod
    def find_by_canon_path(cls, conn: sqlite3.Connection, path) -> list[Entry]:
        """Get the entries whose folder path joined with their path equals ``path``."""
        rows = conn.execute(
            "SELECT `entries`.* FROM `entries` "
            "INNER JOIN `folders` ON `folders`.`id` = `entries`.`folder_id` "
            "WHERE `folders`.`path` || '/' || `entries`.`path` = :target "
            "OR `folders`.`path` || '\\' || `entries`.`path` = :target",
            {"target": str(path)},
        )
        return [cls._from_row(row) for row in rows]

    @classmethod
    def search(cls, conn: sqlite3.Connection, query: QueryFragment) -> list[Entry]:
        """Get the entries matching a search query."""
        return query.fetch_all(conn)

    @classmethod
    def stream_entries(cls, conn: sqlite3.Connection) -> Iterator[Entry]:
        """Iterate over every entry of the library."""
        for row in conn.execute("SELECT * FROM `entries`"):
            yield cls._from_row(row)

    def get_folder(self, conn: sqlite3.Connection) -> Folder:
        """Get the root folder holding this entry."""
        folder = Folder.find_by_id(conn, self.folder_id)
        if folder is None:
            raise TagStudioError("Couldn't find entry's folder")
        return folder

    def get_global_path(self, conn: sqlite3.Connection) -> Path:
        """Get the path of the file on the filesystem."""
        return Path(self.get_folder(conn).path) / self.path

    def get_text_fields(self, conn: sqlite3.Connection) -> list[TextField]:
        rows = conn.execute(
            "SELECT `text_fields`.* FROM `entries` "
            "INNER JOIN `text_fields` ON `text_fields`.`entry_id` = `entries`.`id` "
            "WHERE `entries`.`id` = ?",
            (self.id,),
        )
        return [TextField._from_row(row) for row in rows]

    def get_tags(self, conn: sqlite3.Connection) -> list[Tag]:
        rows = conn.execute(
            "SELECT `tags`.* FROM `entries` "
            "INNER JOIN `tag_entries` ON `tag_entries`.`entry_id` = `entries`.`id` "
            "INNER JOIN `tags` ON `tag_entries`.`tag_id` = `tags`.`id` "
            "WHERE `entries`.`id` = ?",
            (self.id,),
        )
        return [Tag._from_row(row) for row in rows]

    def add_tag(self, conn: sqlite3.Connection, tag_id: int) -> None:
        """Tag this entry; adding a tag twice has no effect."""
        logger.debug("Adding tag %s to entry %s", tag_id, self.id)
        conn.execute(
            "INSERT OR IGNORE INTO `tag_entries`(entry_id, tag_id) VALUES (?, ?)",
            (self.id, tag_id),
        )

    def add_tags(self, conn: sqlite3.Connection, tags: Iterable[Tag]) -> None:
        with _transaction(conn):
            for tag in tags:
                self.add_tag(conn, tag.id)

    def move_file_from_canon_path(self, conn: sqlite3.Connection, new_path) -> None:
        """Move the entry's file to a full path inside its folder."""
        folder = self.get_folder(conn)
        try:
            relative = Path(new_path).relative_to(folder.path)
        except ValueError:
            raise PathNotInFolderError() from None
        self.move_file(conn, str(relative))

    def move_file(self, conn: sqlite3.Connection, new_lib_path: str) -> None:
        """Move the entry's file to another path relative to its folder.

        The database is left untouched if the file cannot be moved.
        """
        with _transaction(conn):
            previous = self.get_global_path(conn)
            conn.execute(
                "UPDATE `entries` SET `path` = ? WHERE `id` = ?",
                (new_lib_path, self.id),
            )
            destination = Path(self.get_folder(conn).path) / new_lib_path
            os.rename(previous, destination)
        self.path = new_lib_path


@dataclass
class TextField:
    """A text value attached to an entry."""

    value: str | None
    id: int
    type_key: str
    entry_id: int
    position: int

    @classmethod
    def _from_row(cls, row: sqlite3.Row) -> TextField:
        return cls(
            value=row["value"],
            id=row["id"],
            type_key=row["type_key"],
            entry_id=row["entry_id"],
            position=row["position"],
        )

    @classmethod
    def insert(
        cls, conn: sqlite3.Connection, entry_id: int, type_key: str, value: str
    ) -> None:
        """Attach a new text field to an entry."""
        conn.execute(
            "INSERT INTO `text_fields` VALUES (?, NULL, ?, ?, 0)",
            (value, type_key, entry_id),
        )

    def get_entry(self, conn: sqlite3.Connection) -> Entry:
        entry = Entry.find_by_id(conn, self.entry_id)
        if entry is None:
            raise TagStudioError("The text field has no associated entry")
        return entry
"""Composable search queries over library entries."""

from __future__ import annotations

import itertools
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterator

from tagstudio_db.entry import Entry


def _placeholder(number: int) -> str:
    return f":p{number}"


class QueryFragment(ABC):
    """A search condition; combine with ``&`` and negate with ``~``.

    Placeholders are numbered from a shared counter, once while building the
    common table expressions and once while building the WHERE clause, so
    each fragment must take the same numbers in both passes, in the order of
    :meth:`params`.
    """

    @abstractmethod
    def get_subquery(self, counter: Iterator[int]) -> str | None:
        """Common table expressions this fragment needs, if any."""

    @abstractmethod
    def get_where_condition(self, counter: Iterator[int]) -> str | None:
        """The condition entries must satisfy, if any."""

    @abstractmethod
    def params(self) -> list:
        """The values bound to this fragment's placeholders, in order."""

    def as_sql(self) -> str:
        lines = []
        subqueries = self.get_subquery(itertools.count(1))
        if subqueries is not None:
            lines.append(f"WITH RECURSIVE {subqueries}")
        lines.append("SELECT DISTINCT\n    `entries`.*\nFROM\n    `entries`")
        condition = self.get_where_condition(itertools.count(1))
        if condition is not None:
            lines.append(f"WHERE {condition}")
        return "\n".join(lines) + "\n"

    def _bindings(self) -> dict:
        return {f"p{number}": value for number, value in enumerate(self.params(), start=1)}

    def fetch_all(self, conn: sqlite3.Connection) -> list[Entry]:
        """Run the query and return the matching entries."""
        rows = conn.execute(self.as_sql(), self._bindings())
        return [Entry._from_row(row) for row in rows]

    def __and__(self, other: QueryFragment) -> QueryAnd:
        if not isinstance(other, QueryFragment):
            return NotImplemented
        return QueryAnd(self, other)

    def __invert__(self) -> QueryNot:
        return QueryNot(self)


@dataclass
class QueryAnd(QueryFragment):
    """Entries matching both fragments."""

    left: QueryFragment
    right: QueryFragment

    def get_subquery(self, counter: Iterator[int]) -> str | None:
        parts = [
            part
            for part in (self.left.get_subquery(counter), self.right.get_subquery(counter))
            if part is not None
        ]
        return ", ".join(parts) if parts else None

    def get_where_condition(self, counter: Iterator[int]) -> str | None:
        left = self.left.get_where_condition(counter)
        right = self.right.get_where_condition(counter)
        if left is not None and right is not None:
            return f"({left} AND {right})"
        return left if left is not None else right

    def params(self) -> list:
        return self.left.params() + self.right.params()


@dataclass
class QueryNot(QueryFragment):
    """Entries not matching the inner fragment."""

    inner: QueryFragment

    def get_subquery(self, counter: Iterator[int]) -> str | None:
        return self.inner.get_subquery(counter)

    def get_where_condition(self, counter: Iterator[int]) -> str | None:
        condition = self.inner.get_where_condition(counter)
        return None if condition is None else f"(NOT ({condition}))"

    def params(self) -> list:
        return self.inner.params()


@dataclass
class EqTag(QueryFragment):
    """Entries carrying a tag, found by name, shorthand or alias, or any of its children."""

    tag_name: str

    def __post_init__(self) -> None:
        self.tag_name = str(self.tag_name)

    def get_subquery(self, counter: Iterator[int]) -> str | None:
        number = next(counter)
        p = _placeholder(number)
        return (
            f"ChildTags_{number} AS (\n"
            "    SELECT `tags`.`id` AS child_id\n"
            "    FROM `tags`\n"
            "        LEFT JOIN `tag_aliases` ON `tags`.`id` = `tag_aliases`.`tag_id`\n"
            "    WHERE\n"
            f"        LOWER(`tags`.`name`) = LOWER({p}) OR\n"
            f"        LOWER(`tags`.`name`) = replace(LOWER({p}), '_', ' ') OR\n"
            f"        LOWER(`tags`.`shorthand`) = LOWER({p}) OR\n"
            f"        LOWER(`tags`.`shorthand`) = replace(LOWER({p}), '_', ' ') OR\n"
            f"        LOWER(`tag_aliases`.`name`) = LOWER({p}) OR\n"
            f"        LOWER(`tag_aliases`.`name`) = replace(LOWER({p}), '_', ' ')\n"
            "    UNION\n"
            "    SELECT tp.parent_id AS child_id\n"
            "    FROM tag_parents tp\n"
            f"        INNER JOIN ChildTags_{number} c ON tp.child_id = c.child_id\n"
            ")"
        )

    def get_where_condition(self, counter: Iterator[int]) -> str | None:
        number = next(counter)
        return (
            "`entries`.`id` IN (\n"
            "    SELECT `entry_id`\n"
            f"    FROM `ChildTags_{number}`\n"
            "        INNER JOIN `tag_entries` "
            f"ON `tag_entries`.`tag_id` = `ChildTags_{number}`.`child_id`\n"
            ")"
        )

    def params(self) -> list:
        return [self.tag_name]


@dataclass
class EqField(QueryFragment):
    """Entries with a boolean, date or text field of a type holding a value."""

    field_type: str
    value: bool | date | str

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bool, date, str)):
            raise TypeError(
                f"field value must be bool, date or str, not {type(self.value).__name__}"
            )

    def get_subquery(self, counter: Iterator[int]) -> str | None:
        next(counter)
        next(counter)
        return None

    def get_where_condition(self, counter: Iterator[int]) -> str | None:
        type_p = _placeholder(next(counter))
        value_p = _placeholder(next(counter))
        selects = "\n    UNION\n".join(
            f"    SELECT `entry_id` FROM `{table}` "
            f"WHERE `type_key` = {type_p} AND `value` = {value_p}"
            for table in ("boolean_fields", "datetime_fields", "text_fields")
        )
        return f"`entries`.`id` IN (\n{selects}\n)"

    def params(self) -> list:
        value = self.value
        if isinstance(value, date):
            value = value.isoformat()
        return [self.field_type, value]
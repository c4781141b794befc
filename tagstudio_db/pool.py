"""A small pool of SQLite connections and the client built on it."""

from __future__ import annotations

import collections
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from urllib.parse import quote

from tagstudio_db.errors import TagStudioError

_MEMORY = ":memory:"


def _connection_uri(database: str) -> str:
    """Turn a connection string or a path into an SQLite URI.

    Files are opened read-write and are never created.
    """
    text = str(database)
    for prefix in ("sqlite://", "sqlite:"):
        if text.startswith(prefix):
            text = text[len(prefix):]
            break
    path, _, query = text.partition("?")
    if path in ("", _MEMORY):
        return "file::memory:" + (f"?{query}" if query else "")
    params = [part for part in query.split("&") if part]
    if not any(part.startswith("mode=") for part in params):
        params.append("mode=rw")
    return f"file:{quote(path)}?{'&'.join(params)}"


class ConnectionPool:
    """A bounded pool of raw SQLite connections.

    Connections run in autocommit mode; callers open transactions with
    explicit ``BEGIN`` statements. An unfinished transaction is rolled back
    when a connection goes back to the pool.
    """

    def __init__(self, database, max_size=None):
        if max_size is None:
            max_size = (os.cpu_count() or 1) * 4
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.database = str(database)
        self.max_size = max_size
        self._uri = _connection_uri(self.database)
        self._idle: collections.deque[sqlite3.Connection] = collections.deque()
        self._slots = threading.BoundedSemaphore(max_size)
        self._lock = threading.Lock()
        self._closed = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._uri, uri=True, isolation_level=None, check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _take(self) -> sqlite3.Connection:
        while True:
            with self._lock:
                if not self._idle:
                    break
                conn = self._idle.pop()
            try:
                conn.execute("SELECT 1").fetchone()
                return conn
            except sqlite3.Error:
                conn.close()
        return self._connect()

    def _give_back(self, conn: sqlite3.Connection) -> None:
        try:
            if conn.in_transaction:
                conn.rollback()
        except sqlite3.Error:
            conn.close()
            return
        with self._lock:
            if self._closed:
                conn.close()
            else:
                self._idle.append(conn)

    @contextmanager
    def get(self) -> Iterator[sqlite3.Connection]:
        """Borrow a connection, waiting for a free slot if the pool is full."""
        if self._closed:
            raise TagStudioError("the connection pool is closed")
        self._slots.acquire()
        try:
            conn = self._take()
        except BaseException:
            self._slots.release()
            raise
        try:
            yield conn
        finally:
            self._give_back(conn)
            self._slots.release()

    def close(self) -> None:
        """Close idle connections and refuse further borrowing."""
        with self._lock:
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
        for conn in idle:
            conn.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> ConnectionPool:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class TagStudioClient:
    """Access to one TagStudio database through a connection pool."""

    def __init__(self, pool):
        self.pool = pool

    @classmethod
    def open_library(cls, library_path) -> TagStudioClient:
        """Open the database stored inside the library folder."""
        path = Path(library_path) / ".TagStudio" / "ts_library.sqlite"
        return cls.from_connection_string(str(path))

    @classmethod
    def from_connection_string(cls, db) -> TagStudioClient:
        return cls(ConnectionPool(db))

    def get_connection(self):
        """Borrow a connection from the pool, as a context manager."""
        return self.pool.get()
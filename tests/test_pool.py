import sqlite3
import threading

import pytest

from tagstudio_db.errors import TagStudioError
from tagstudio_db.pool import ConnectionPool, TagStudioClient


def _make_db(path):
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE items (value TEXT)")
    conn.execute("INSERT INTO items VALUES ('hello')")
    conn.commit()
    conn.close()


@pytest.mark.parametrize("database", [":memory:", "sqlite::memory:"])
def test_memory_connection_runs_queries(database):
    pool = ConnectionPool(database, 2)
    with pool.get() as conn:
        assert conn.execute("SELECT 1 + 1").fetchone()[0] == 2


def test_idle_connection_is_reused():
    pool = ConnectionPool(":memory:", 1)
    with pool.get() as conn:
        conn.execute("CREATE TABLE t (x INTEGER)")
        conn.execute("INSERT INTO t VALUES (7)")
    with pool.get() as conn:
        assert conn.execute("SELECT x FROM t").fetchone()[0] == 7


def test_concurrent_borrows_get_distinct_connections():
    pool = ConnectionPool(":memory:", 2)
    with pool.get() as first, pool.get() as second:
        assert first is not second
        first.execute("CREATE TABLE only_first (x)")
        with pytest.raises(sqlite3.OperationalError):
            second.execute("SELECT * FROM only_first")


def test_open_transaction_is_rolled_back_on_release():
    pool = ConnectionPool(":memory:", 1)
    with pool.get() as conn:
        conn.execute("CREATE TABLE t (x INTEGER)")
    with pool.get() as conn:
        conn.execute("BEGIN")
        conn.execute("INSERT INTO t VALUES (1)")
    with pool.get() as conn:
        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0


def test_waiting_borrower_gets_released_connection():
    pool = ConnectionPool(":memory:", 1)
    seen = []

    def borrow():
        with pool.get() as conn:
            seen.append(conn)

    with pool.get() as held:
        worker = threading.Thread(target=borrow)
        worker.start()
        worker.join(0.2)
        assert seen == []
    worker.join(5)
    assert seen == [held]


def test_closed_pool_refuses_borrowing():
    pool = ConnectionPool(":memory:", 1)
    pool.close()
    assert pool.closed
    with pytest.raises(TagStudioError, match="closed"):
        with pool.get():
            pass


def test_zero_max_size_rejected():
    with pytest.raises(ValueError):
        ConnectionPool(":memory:", 0)


def test_missing_file_is_not_created(tmp_path):
    target = tmp_path / "missing.sqlite"
    pool = ConnectionPool(str(target), 1)
    with pytest.raises(sqlite3.OperationalError):
        with pool.get():
            pass
    assert not target.exists()


def test_existing_file_can_be_read(tmp_path):
    target = tmp_path / "data.sqlite"
    _make_db(target)
    pool = ConnectionPool(f"sqlite://{target}", 1)
    with pool.get() as conn:
        assert conn.execute("SELECT value FROM items").fetchone()["value"] == "hello"


def test_foreign_keys_enabled():
    pool = ConnectionPool(":memory:", 1)
    with pool.get() as conn:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_client_open_library(tmp_path):
    (tmp_path / ".TagStudio").mkdir()
    _make_db(tmp_path / ".TagStudio" / "ts_library.sqlite")
    client = TagStudioClient.open_library(tmp_path)
    with client.get_connection() as conn:
        assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 1


def test_client_open_library_without_database(tmp_path):
    client = TagStudioClient.open_library(tmp_path)
    with pytest.raises(sqlite3.OperationalError):
        with client.get_connection():
            pass


def test_client_from_connection_string():
    client = TagStudioClient.from_connection_string("sqlite::memory:")
    with client.get_connection() as conn:
        assert conn.execute("SELECT 'ok'").fetchone()[0] == "ok"
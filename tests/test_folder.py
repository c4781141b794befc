import pytest

from tagstudio_db.folder import Folder
from tagstudio_db.library import Library

SCHEMA = """
CREATE TABLE folders (
    id INTEGER NOT NULL,
    path VARCHAR NOT NULL,
    uuid VARCHAR NOT NULL,
    PRIMARY KEY (id),
    UNIQUE (path),
    UNIQUE (uuid)
);
INSERT INTO folders VALUES(0,'/tmp/','uuid');
"""


@pytest.fixture
def conn():
    lib = Library.in_memory()
    with lib.db.get() as connection:
        connection.executescript(SCHEMA)
        yield connection
    lib.close()


def test_find_existing_folder(conn):
    folder = Folder.find_by_id(conn, 0)
    assert folder == Folder(id=0, path="/tmp/", uuid="uuid")


def test_find_missing_folder(conn):
    assert Folder.find_by_id(conn, 42) is None


def test_find_inserted_folder(conn):
    conn.execute("INSERT INTO folders VALUES(?, ?, ?)", (5, "/srv/library", "other"))
    folder = Folder.find_by_id(conn, 5)
    assert (folder.id, folder.path, folder.uuid) == (5, "/srv/library", "other")
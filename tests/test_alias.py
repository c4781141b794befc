import pytest

from tagstudio_db.alias import TagAlias
from tagstudio_db.library import Library

SCHEMA = """
CREATE TABLE tags (
    id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    name VARCHAR NOT NULL,
    shorthand VARCHAR,
    color_namespace VARCHAR,
    color_slug VARCHAR,
    is_category BOOLEAN NOT NULL,
    icon VARCHAR,
    disambiguation_id INTEGER
);
INSERT INTO tags VALUES(0,'Archived',NULL,NULL,NULL,0,NULL,NULL);
INSERT INTO tags VALUES(1,'Favorite',NULL,NULL,NULL,0,NULL,NULL);
CREATE TABLE tag_aliases (
    id INTEGER NOT NULL,
    name VARCHAR NOT NULL,
    tag_id INTEGER NOT NULL,
    PRIMARY KEY (id),
    FOREIGN KEY(tag_id) REFERENCES tags (id)
);
INSERT INTO tag_aliases VALUES(1,'Archive',0);
INSERT INTO tag_aliases VALUES(4,'Favorites',1);
INSERT INTO tag_aliases VALUES(5,'Favorited',1);
"""


@pytest.fixture
def conn():
    lib = Library.in_memory()
    with lib.db.get() as connection:
        connection.executescript(SCHEMA)
        yield connection
    lib.close()


def test_find_existing_alias(conn):
    found = TagAlias.find_by_name(conn, "Archive", 0)
    assert [(a.id, a.name, a.tag_id) for a in found] == [(1, "Archive", 0)]


def test_find_is_scoped_to_tag(conn):
    assert TagAlias.find_by_name(conn, "Archive", 1) == []


def test_insert_new_alias(conn):
    assert TagAlias.insert(conn, "Stored", 0) is True
    found = TagAlias.find_by_name(conn, "Stored", 0)
    assert [(a.name, a.tag_id) for a in found] == [("Stored", 0)]


def test_insert_does_not_duplicate(conn):
    assert TagAlias.insert(conn, "Favorites", 1) is False
    assert len(TagAlias.find_by_name(conn, "Favorites", 1)) == 1


def test_insert_ignores_empty_name(conn):
    before = conn.execute("SELECT COUNT(*) FROM tag_aliases").fetchone()[0]
    assert TagAlias.insert(conn, "", 0) is False
    after = conn.execute("SELECT COUNT(*) FROM tag_aliases").fetchone()[0]
    assert after == before


def test_same_name_on_other_tag_is_added(conn):
    assert TagAlias.insert(conn, "Archive", 1) is True
    assert len(TagAlias.find_by_name(conn, "Archive", 1)) == 1
    assert len(TagAlias.find_by_name(conn, "Archive", 0)) == 1
# tagstudio_db

A Python library for working with the SQLite database of a TagStudio
library (`<library>/.TagStudio/ts_library.sqlite`). It finds the library
root from any path inside it, hands out pooled connections, and lets you
read and change tags, aliases, tag hierarchies, entries and text fields.
It also builds tag and field searches that can be combined.

It uses only the standard library (`sqlite3`).

## Opening a library

```python
from tagstudio_db.library import Library, get_library_root, is_folder_library_root

# Searches upward from the given path for a folder holding
# .TagStudio/ts_library.sqlite; raises LibraryNotFoundError otherwise.
lib = Library.open("/photos/holiday/2023")
print(lib.path)                                  # the library root
print(get_library_root("/photos/holiday/2023"))  # same root, or None
print(is_folder_library_root("/photos"))

# A library backed by an in-memory SQLite database.
scratch = Library.in_memory()
```

`Library` is a context manager; leaving the block closes its pool.
`lib.db` is a `ConnectionPool`, and `lib.db.get()` lends out a connection
as a context manager:

```python
with Library.open("/photos") as lib, lib.db.get() as conn:
    ...
```

You can also connect through a client:

```python
from tagstudio_db.pool import TagStudioClient

client = TagStudioClient.open_library("/photos")
with client.get_connection() as conn:
    ...
```

`TagStudioClient.from_connection_string()` takes a file path, an
`sqlite:` connection string or `:memory:`. Pooled connections are
`sqlite3.Connection` objects in autocommit mode with rows as
`sqlite3.Row`; a transaction left open is rolled back when the connection
goes back to the pool. `ConnectionPool(database, max_size)` limits how many
connections are lent out at once and waits for a free one when the limit
is reached.

## Tags

```python
from tagstudio_db.tag import Tag

cat = Tag.get_by_name_or_insert_new(conn, "cat")[0]
maxwell = Tag("Maxwell").insert(conn)      # returns the stored tag, with its id
feline = Tag("Feline").insert(conn)

cat.add_child(conn, maxwell.id)
cat.add_parent(conn, feline.id)
cat.add_alias(conn, "Felis")               # skips duplicates and the tag's own name

list(cat.get_children(conn))
list(cat.get_parents(conn))
list(cat.get_aliases(conn))

# Lookup by name, shorthand or alias, ignoring case; "_" matches a space.
Tag.find_by_name(conn, "meta_tag")
Tag.find_by_exact_name(conn, "Cat")
Tag.find_by_id(conn, 1000)

# Renames the tag and, unless no_aliasing is true, also stores the
# new name as an alias of the tag.
cat.rename(conn, "Cat", no_aliasing=False)

# Moves the name, shorthand, aliases, parents and children of another tag
# into this one, then deletes the other tag.
cat.merge_tag(conn, other_tag)

# Removes the tag with its aliases, entry links and relations.
other.delete(conn)
```

`add_parents()`, `add_children()`, `rename()`, `merge_tag()` and `delete()`
run inside a savepoint, so they either apply completely or not at all.
`TagAlias.find_by_name()` and `TagAlias.insert()` in `tagstudio_db.alias`
work with aliases directly.

## Entries and fields

```python
from tagstudio_db.entry import Entry, TextField

entry = Entry.find_by_id(conn, 0)
Entry.find_by_path(conn, "maxwell.png")              # path relative to its folder
Entry.find_by_canon_path(conn, "/tmp/maxwell.png")   # folder path + "/" or "\" + path
for e in Entry.stream_entries(conn):
    ...

entry.get_folder(conn)          # the Folder row holding the entry
entry.get_global_path(conn)     # folder path joined with the entry path
entry.get_tags(conn)
entry.add_tag(conn, cat.id)     # adding a tag twice has no effect
entry.get_text_fields(conn)

TextField.insert(conn, entry.id, "DESCRIPTION", "A very dingus cat")

# Renames the file on disk and updates the entry; the database change is
# undone if the file cannot be moved.
entry.move_file(conn, "cats/maxwell.png")
entry.move_file_from_canon_path(conn, "/tmp/cats/maxwell.png")
```

`move_file_from_canon_path()` raises `PathNotInFolderError` when the new path
is not inside the entry's folder. Date columns of entries are read as naive
`datetime` objects.

## Searching

```python
from tagstudio_db.entry import Entry
from tagstudio_db.query import EqTag, EqField

query = EqTag("Maxwell") & ~EqTag("Doge")
for entry in query.fetch_all(conn):
    print(entry.path, [t.name for t in entry.get_tags(conn)])

described = Entry.search(conn, EqField("DESCRIPTION", "A very dingus cat"))
print(query.as_sql())
```

`EqTag` finds its tag by name, shorthand or alias, like `Tag.find_by_name()`,
and then follows `tag_parents` links recursively, so entries carrying a
related tag in the hierarchy match as well. `EqField` matches boolean, date
and text fields of a type holding a value; the value must be a `bool`, a
`datetime.date` or a `str`. `&` builds a `QueryAnd` and `~` a `QueryNot`.

## Errors

Errors raised by the library itself are subclasses of
`tagstudio_db.errors.TagStudioError`: `LibraryNotFoundError`,
`PathNotInFolderError`, and plain `TagStudioError` for a closed pool or a
missing related row. Database and file errors come through as
`sqlite3.Error` and `OSError`.

## What it does not do

The package does not create or migrate the database schema. Opening a
library or a file path never creates the database file, and
`Library.in_memory()` starts with an empty database that has no tables
until you create them. There is no command-line tool.
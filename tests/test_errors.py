import pytest

from tagstudio_db.errors import (
    LibraryNotFoundError,
    PathNotInFolderError,
    TagStudioError,
)


def test_library_not_found_message():
    assert str(LibraryNotFoundError()) == "Couldn't find the library"


def test_path_not_in_folder_message():
    assert str(PathNotInFolderError()) == "The path given isn't part of the folder"


@pytest.mark.parametrize(
    ("cls", "message"),
    [
        (LibraryNotFoundError, "Couldn't find the library"),
        (PathNotInFolderError, "The path given isn't part of the folder"),
    ],
)
def test_subclasses_are_caught_as_base(cls, message):
    with pytest.raises(TagStudioError) as info:
        raise cls()
    assert type(info.value) is cls
    assert str(info.value) == message


def test_custom_message_overrides_default():
    assert str(LibraryNotFoundError("nothing at /srv")) == "nothing at /srv"


def test_errors_are_distinct():
    library_error = LibraryNotFoundError()
    path_error = PathNotInFolderError()
    assert not isinstance(library_error, PathNotInFolderError)
    assert not isinstance(path_error, LibraryNotFoundError)
    assert str(library_error) != str(path_error)
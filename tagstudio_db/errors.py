"""Exceptions raised by the library."""


class TagStudioError(Exception):
    """Base class for errors raised by this package."""

    default_message = "TagStudio database error"

    def __init__(self, message=None):
        super().__init__(message if message is not None else self.default_message)


class LibraryNotFoundError(TagStudioError):
    """No TagStudio library could be found for the given path."""

    default_message = "Couldn't find the library"


class PathNotInFolderError(TagStudioError):
    """A path lies outside of the library folder it was expected in."""

    default_message = "The path given isn't part of the folder"
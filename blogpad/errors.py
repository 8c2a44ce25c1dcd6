class BlogpadError(Exception):
    """Base class for blogpad failures."""


class PersistError(BlogpadError):
    """Writing the collection to its blob failed; the in-memory change was undone."""

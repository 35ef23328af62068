"""
Error types shared by the search engine, storage layer and HTTP API.
"""


class QuranError(Exception):
    """Base class for all application errors."""
    pass


class ValidationError(QuranError):
    """Request parameters are malformed; raised before storage is touched."""
    pass


class NotFoundError(QuranError):
    """A surah, verse or bookmark does not exist."""
    pass


class ConflictError(QuranError):
    """The row already exists (duplicate bookmark)."""
    pass


class StorageError(QuranError):
    """The database could not complete an operation."""
    pass


class UpstreamError(QuranError):
    """The upstream content provider failed or returned an unusable payload."""
    pass

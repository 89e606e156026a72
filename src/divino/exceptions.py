"""Custom exceptions for divino."""


class DivinoError(Exception):
    """Base exception for divino."""

    pass


class RequestFailed(DivinoError):
    """Raised when the model call errors or its response cannot be parsed."""

    pass


class QuotaExceeded(RequestFailed):
    """Raised when the model API quota or rate limit is exceeded."""

    pass


class AuthenticationError(RequestFailed):
    """Raised when API key is invalid or missing."""

    pass


class ImageError(RequestFailed):
    """Raised when image cannot be read or is invalid."""

    pass


class NoResultsFound(DivinoError):
    """Raised when a text search matches no wine."""

    pass


class StorageReadFailed(DivinoError):
    """Raised when persisted data is corrupt and cannot be decoded."""

    pass

"""
Storage error taxonomy for Shortener Platform.

Every backend translates its own failures (dict misses, OS errors, psycopg
errors) into one of these types, so callers can react to the *kind* of
failure without knowing which backend is active.

Classes:
    StorageError:     base class for everything raised by the storage layer.
    DuplicateError:   a uniqueness rule was violated (short code or original URL).
    NotFoundError:    no record has the requested short code.
    DecodeError:      a short code is not valid base64 / UTF-8.
    SetupError:       bootstrap could not prepare the backing resource.
    UnavailableError: the backend is unreachable or timed out.

Example:
    >>> from shortener_platform.storage.exceptions import NotFoundError
    >>> raise NotFoundError("url not found: abc")
    Traceback (most recent call last):
        ...
    shortener_platform.storage.exceptions.NotFoundError: url not found: abc
"""

from typing import Optional


class StorageError(Exception):
    """Generic base class for storage-related exceptions."""

    pass


class DuplicateError(StorageError):
    """Raised when a record collides with an existing one.

    `short_link` is filled in by the manager so HTTP handlers can still answer
    with the already-issued link on a conflict.
    """

    def __init__(self, message: str = "original url is already created", short_link: Optional[str] = None):
        super().__init__(message)
        self.short_link = short_link


class NotFoundError(StorageError):
    """Raised when no record has the requested short code."""

    pass


class DecodeError(StorageError):
    """Raised when a short code cannot be decoded back into a URL."""

    pass


class SetupError(StorageError):
    """Raised when bootstrap cannot prepare the backing map, file or table."""

    pass


class UnavailableError(StorageError):
    """Raised when the backend is unreachable or an operation timed out."""

    pass

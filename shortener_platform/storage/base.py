"""
Base storage interface for Shortener Platform.

Purpose:
    Define a small, stable contract that the in-memory, file and PostgreSQL
    backends implement, so the manager and the HTTP layer never need to know
    which one is active.

Error contract:
    Implementations never log and never swallow failures. Everything they
    raise is a `StorageError` subclass (see `exceptions.py`).

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from .models import URLRecord


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def bootstrap(self) -> None:
        """
        Prepare the backing map, file or table if it does not exist yet.

        Must be idempotent: calling it again never loses data.

        Raises:
            SetupError: The resource could not be prepared.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def ping(self, timeout: Optional[float] = None) -> None:
        """
        Liveness check.

        In-process backends succeed immediately; networked backends perform a
        round trip bounded by `timeout` seconds.

        Raises:
            UnavailableError: The backend is unreachable or timed out.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def save_url(self, short_url: str, original_url: str, user_id: Optional[str] = None) -> URLRecord:
        """
        Insert one record and return it with its assigned id.

        Raises:
            DuplicateError: Where the backend enforces uniqueness and the
                record collides with an existing one.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def save_batch_url(self, records: Iterable[URLRecord]) -> List[URLRecord]:
        """
        Insert many records as one logical unit.

        Transactional backends persist all or nothing. The others apply the
        records one at a time and stop at the first failure, leaving the
        earlier ones persisted.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_url(self, short_url: str) -> URLRecord:
        """
        Exact-match lookup by short code.

        Raises:
            NotFoundError: No record has that code.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_user_urls(self, user_id: str) -> List[URLRecord]:
        """Return every record owned by `user_id`, unordered (empty list when none)."""
        raise NotImplementedError

    def close(self) -> None:
        """Release held resources. In-process backends have nothing to release."""
        return None

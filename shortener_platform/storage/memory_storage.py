"""
Storage module for Shortener Platform (in-memory implementation).

Responsibilities:
    - Keep short_url -> URLRecord mappings for the life of the process
    - Assign increasing record ids
    - Provide lookup by code and enumeration by owner

Design:
    - Default backend when neither a database DSN nor a file path is configured.
    - Saves are last-write-wins on the short code; duplicate original URLs are
      not detected here (the PostgreSQL backend does that).
    - A single re-entrant lock guards every read and write of the map, so the
      store can be shared by the request thread pool.
"""

import threading
from typing import Dict, Iterable, List, Optional

from .base import BaseStorage
from .exceptions import NotFoundError
from .models import URLRecord


class MemoryStorage(BaseStorage):
    def __init__(self) -> None:
        """
        Initialize an empty store.

        Internal schema:
            self.urls = {short_url: URLRecord(...)}
        """
        self.urls: Dict[str, URLRecord] = {}
        self._last_id = 0
        self._lock = threading.RLock()

    def bootstrap(self) -> None:
        # The map already exists; re-bootstrapping must not drop data.
        return None

    def ping(self, timeout: Optional[float] = None) -> None:
        return None

    def save_url(self, short_url: str, original_url: str, user_id: Optional[str] = None) -> URLRecord:
        """
        Save a mapping, overwriting any record stored under the same code.

        The id is `size + 1` for a fresh insert. An overwrite still gets a new
        id from the counter, so no two live records ever share one.
        """
        with self._lock:
            self._last_id = max(self._last_id, len(self.urls)) + 1
            record = URLRecord(
                id=self._last_id,
                short_url=short_url,
                original_url=original_url,
                user_id=user_id or None,
            )
            self.urls[short_url] = record
            return record

    def save_batch_url(self, records: Iterable[URLRecord]) -> List[URLRecord]:
        saved: List[URLRecord] = []
        with self._lock:
            for rec in records:
                stored = self.save_url(rec.short_url, rec.original_url, user_id=rec.user_id)
                saved.append(stored.model_copy(update={"correlation_id": rec.correlation_id}))
        return saved

    def get_url(self, short_url: str) -> URLRecord:
        with self._lock:
            record = self.urls.get(short_url.strip())
        if record is None or not record.original_url:
            raise NotFoundError(f"url not found: {short_url}")
        return record

    def get_user_urls(self, user_id: str) -> List[URLRecord]:
        owner = user_id.strip()
        with self._lock:
            return [rec for rec in self.urls.values() if rec.user_id == owner]

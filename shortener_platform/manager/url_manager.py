"""
URLManager module for Shortener Platform.

Responsibilities:
    - Validate incoming long URLs
    - Encode them into short codes (base64, see `codec.py`)
    - Build records and hand them to the injected storage backend
    - Render short codes as absolute short links

Design notes:
    - The manager depends on `BaseStorage` only; the backend is chosen once by
      the storage factory and injected here.
    - Storage errors are not caught here, except to attach the already-issued
      short link to a `DuplicateError` so the HTTP layer can answer 409 with it.
    - Batch input is fully validated before the store is touched.
"""

import logging
from typing import Iterable, List, Mapping, Optional
from urllib.parse import urlparse

from ..storage.base import BaseStorage
from ..storage.exceptions import DuplicateError
from ..storage.models import URLRecord
from .codec import decode_url, encode_url

log = logging.getLogger("shortener.manager")


class URLManager:
    """
    Coordinates shortening, expansion and per-user listing of URLs.
    """

    def __init__(self, storage: BaseStorage, base_url: str = "http://localhost:8080"):
        """
        Args:
            storage (BaseStorage): Backend storage instance.
            base_url (str): Prefix of issued short links, without trailing slash.
        """
        self.storage = storage
        self.base_url = base_url.rstrip("/")

    # ---------------------------------------------------------------------
    # Validation / Rendering Helpers
    # ---------------------------------------------------------------------
    def validate_url(self, url: str) -> str:
        """
        Check that `url` is an absolute URL with a scheme and a host.

        Returns:
            str: The URL stripped of surrounding whitespace.

        Raises:
            ValueError: If the URL is malformed.
        """
        candidate = (url or "").strip()
        try:
            parsed = urlparse(candidate)
        except ValueError as exc:
            raise ValueError("Invalid URL format") from exc
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("Invalid URL format")
        return candidate

    def short_link(self, code: str) -> str:
        return f"{self.base_url}/{code}"

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def shorten(self, url: str, user_id: Optional[str] = None) -> str:
        """
        Shorten one URL and persist the mapping.

        Returns:
            str: Absolute short link.

        Raises:
            ValueError: On an invalid URL.
            DuplicateError: When the backend already holds this URL; the
                error's `short_link` carries the existing link.
        """
        original = self.validate_url(url)
        code = encode_url(original)
        link = self.short_link(code)
        try:
            self.storage.save_url(code, original, user_id=user_id)
        except DuplicateError as exc:
            exc.short_link = link
            raise
        log.info("shortened %s -> %s", original, code)
        return link

    def shorten_batch(self, items: Iterable[Mapping[str, str]], user_id: Optional[str] = None) -> List[URLRecord]:
        """
        Shorten many URLs with one `save_batch_url` call.

        Args:
            items: Mappings with `correlation_id` and `original_url`.

        Returns:
            List[URLRecord]: `correlation_id` plus `short_url` (absolute link)
            for every input row, in input order.

        Raises:
            ValueError: If any URL is invalid (nothing is saved).
            DuplicateError: Propagated from the backend.
        """
        to_save: List[URLRecord] = []
        for item in items:
            original = self.validate_url(item.get("original_url", ""))
            to_save.append(
                URLRecord(
                    correlation_id=item.get("correlation_id"),
                    short_url=encode_url(original),
                    original_url=original,
                    user_id=user_id or None,
                )
            )

        self.storage.save_batch_url(to_save)
        log.info("shortened batch of %d urls", len(to_save))
        return [URLRecord(correlation_id=rec.correlation_id, short_url=self.short_link(rec.short_url)) for rec in to_save]

    def expand(self, code: str) -> str:
        """Decode a short code back into its URL (no storage lookup)."""
        return decode_url(code)

    def user_urls(self, user_id: str) -> List[URLRecord]:
        """Records owned by `user_id`, with `short_url` rendered as an absolute link."""
        return [
            URLRecord(short_url=self.short_link(rec.short_url), original_url=rec.original_url)
            for rec in self.storage.get_user_urls(user_id)
        ]

    def ping(self, timeout: Optional[float] = None) -> None:
        self.storage.ping(timeout=timeout)

"""
FileStorage – append-only file backend for Shortener Platform
=============================================================

Persists one JSON object per line:

    {"uuid":1,"short_url":"aHR0cHM6Ly9hLmNv","original_url":"https://a.co"}
    {"uuid":2,"short_url":"...","original_url":"...","user_id":"42"}

The file is a concatenation of independent JSON values, not a JSON document.

Key Design Points
-----------------
- **No cached counter**: every save rescans the file to find the last complete
  record and derives the next id from it. O(file size) per write; this backend
  trades throughput for simplicity.
- **Single writer**: scan, id assignment and append run under one lock per
  instance, so concurrent saves cannot compute the same id.
- **Framing**: a record starts on a line beginning with `{` and is complete
  once a line ends with `}` and the collected text parses. Compact one-line
  records and pretty-printed ones (closing brace alone on its line) both work;
  a torn trailing fragment is ignored. Bytes that are not UTF-8 are read as
  U+FFFD, so a damaged line is skipped like any other corrupt record.
- **No uniqueness index**: re-saving a short code that is already in the file
  is an idempotent no-op returning the stored record.
"""

import io
import os
import threading
from typing import IO, Iterable, Iterator, List, Optional

from pydantic import ValidationError

from .base import BaseStorage
from .exceptions import NotFoundError, SetupError, StorageError, UnavailableError
from .models import URLRecord


class FileStorage(BaseStorage):
    """Append-only line-delimited JSON implementation of the storage contract.

    Parameters
    ----------
    path : str
        Location of the storage file. Parent directories are created by
        `bootstrap()`.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _iter_records(fh: IO[str]) -> Iterator[URLRecord]:
        """Yield every complete record from the current position to EOF."""
        pending: List[str] = []
        for line in fh:
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith("{"):
                pending = []
            if not pending and not stripped.startswith("{"):
                continue  # stray fragment outside any record
            pending.append(line)
            if not stripped.endswith("}"):
                continue
            try:
                yield URLRecord.from_json("".join(pending))
            except ValidationError:
                pass  # incomplete or corrupt record
            pending = []

    def _scan(self) -> List[URLRecord]:
        try:
            with open(self.path, "r", encoding="utf-8", errors="replace") as fh:
                return list(self._iter_records(fh))
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"can't read {self.path}: {exc}") from exc

    # ---- Contract methods -------------------------------------------------

    def bootstrap(self) -> None:
        try:
            parent = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(parent, exist_ok=True)
            # "a" creates the file when absent and never truncates it.
            with open(self.path, "a", encoding="utf-8"):
                pass
        except OSError as exc:
            raise SetupError(f"can't prepare storage file {self.path}: {exc}") from exc

    def ping(self, timeout: Optional[float] = None) -> None:
        if not os.path.isfile(self.path):
            raise UnavailableError(f"storage file {self.path} does not exist")

    def save_url(self, short_url: str, original_url: str, user_id: Optional[str] = None) -> URLRecord:
        """Append a record with id = last id + 1 (or 1 for an empty file).

        Returns the stored record; when the short code is already present the
        existing record is returned and nothing is written.
        """
        with self._lock:
            try:
                with open(self.path, "a+", encoding="utf-8", errors="replace") as fh:
                    fh.seek(0)
                    content = fh.read()
                    last: Optional[URLRecord] = None
                    for rec in self._iter_records(io.StringIO(content)):
                        if rec.short_url == short_url:
                            return rec
                        last = rec

                    next_id = (last.id or 0) + 1 if last is not None else 1
                    record = URLRecord(
                        id=next_id,
                        short_url=short_url,
                        original_url=original_url,
                        user_id=user_id or None,
                    )
                    line = record.to_json() + "\n"
                    if content and not content.endswith("\n"):
                        # keep a torn tail from swallowing the new record
                        line = "\n" + line
                    # Appends always land at EOF in "a+" mode, whatever the read position.
                    fh.write(line)
                    return record
            except OSError as exc:
                raise StorageError(f"can't write {self.path}: {exc}") from exc

    def save_batch_url(self, records: Iterable[URLRecord]) -> List[URLRecord]:
        """Save records one by one; the first failure stops the batch (no rollback).

        Returned records carry the caller's `correlation_id`; it is not persisted.
        """
        saved: List[URLRecord] = []
        for rec in records:
            stored = self.save_url(rec.short_url, rec.original_url, user_id=rec.user_id)
            saved.append(stored.model_copy(update={"correlation_id": rec.correlation_id}))
        return saved

    def get_url(self, short_url: str) -> URLRecord:
        code = short_url.strip()
        with self._lock:
            for rec in self._scan():
                if rec.short_url == code:
                    return rec
        raise NotFoundError(f"url not found: {short_url}")

    def get_user_urls(self, user_id: str) -> List[URLRecord]:
        owner = user_id.strip()
        with self._lock:
            return [rec for rec in self._scan() if rec.user_id == owner]

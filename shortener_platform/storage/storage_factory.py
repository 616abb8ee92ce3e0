"""
Storage factory – pick the storage backend from settings
========================================================

This module centralizes selection of the storage backend so the rest of the
app only ever sees a `BaseStorage`.

Precedence
----------
1. `settings.database_dsn` set    -> DBStorage (PostgreSQL)
2. `settings.file_storage_path` set -> FileStorage
3. otherwise                        -> MemoryStorage

The DB backend is imported only when selected, so running with the memory or
file backend never touches psycopg.
"""

from typing import Optional

from ..config import Settings
from .base import BaseStorage
from .file_storage import FileStorage
from .memory_storage import MemoryStorage


def get_storage(settings: Optional[Settings] = None) -> BaseStorage:
    """
    Return the backend selected by `settings` (built from the environment if omitted).

    The backend is constructed but not bootstrapped; callers run
    `bootstrap()` at startup.
    """
    settings = settings or Settings.from_env()
    backend = settings.storage_backend

    if backend == "postgres":
        # Local import to avoid hard dependency when not using postgres
        from .db_storage import DBStorage

        return DBStorage(dsn=settings.database_dsn, timeout=settings.db_timeout)

    if backend == "file":
        return FileStorage(path=settings.file_storage_path)

    return MemoryStorage()

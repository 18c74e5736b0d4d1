"""
Blob store backends: an opaque ``get(key)`` / ``set(key, value)`` string store.

Callers serialize their own payloads. No backend retries; failures surface
as :class:`BlobStoreError` for the single call that failed. Concurrent
writers get last-write-wins semantics.
"""

from __future__ import annotations

import re
import threading
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.blob_entry import BlobEntry
from db.repositories.errors import BlobStoreError

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class BlobStore(Protocol):
    """
    Abstract key/value backend used by the snapshot and settings repositories.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


def _validate_key(key: str) -> str:
    if not key or not _SAFE_KEY.match(key):
        raise BlobStoreError(f"Invalid blob key {key!r}.")
    return key


class InMemoryBlobStore:
    """
    Process-local backend; contents are lost on restart.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(_validate_key(key))

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[_validate_key(key)] = value


class LocalFileBlobStore:
    """
    One file per key under *root_dir*, replaced atomically on every write.
    """

    def __init__(self, root_dir: str | Path = "data/blobs") -> None:
        self._root_dir = Path(root_dir)

    def _path(self, key: str) -> Path:
        return self._root_dir / f"{_validate_key(key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise BlobStoreError(f"Failed to read blob {key!r} from storage.") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise BlobStoreError(f"Failed to write blob {key!r} to storage.") from exc


class SQLAlchemyBlobStore:
    """
    Backend storing each key as one ``blob_entries`` row.

    A fresh session is opened per call so the store can be shared across
    requests.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        _validate_key(key)
        try:
            with self._session_factory() as db:
                entry = db.get(BlobEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            raise BlobStoreError(f"Failed to read blob {key!r} from database.") from exc

    def set(self, key: str, value: str) -> None:
        _validate_key(key)
        try:
            with self._session_factory() as db:
                entry = db.get(BlobEntry, key)
                if entry is None:
                    db.add(BlobEntry(key=key, value=value))
                else:
                    entry.value = value
                db.commit()
        except SQLAlchemyError as exc:
            raise BlobStoreError(f"Failed to write blob {key!r} to database.") from exc


def create_blob_store(backend: str, *, blob_dir: str | Path = "data/blobs") -> BlobStore:
    """
    Build the backend named *backend* (``memory``, ``database`` or ``file``).

    Anything else is treated as ``file``. The database engine is only
    imported for the ``database`` backend.
    """

    if backend == "memory":
        return InMemoryBlobStore()
    if backend == "database":
        from db.session import SessionLocal

        return SQLAlchemyBlobStore(SessionLocal)
    return LocalFileBlobStore(blob_dir)

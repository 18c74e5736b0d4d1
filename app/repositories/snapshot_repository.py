"""
app/repositories/snapshot_repository.py

Newest-first snapshot store persisted as one JSON blob.

Index 0 is always the most recently *imported* snapshot, regardless of the
snapshot's own ``date``. Snapshots are only ever added or removed whole.
"""

from __future__ import annotations

import logging
import threading
import weakref

from pydantic import TypeAdapter, ValidationError

from app.domain.reconciliation import Snapshot
from db.repositories.blob_store import BlobStore
from db.repositories.errors import BlobDecodeError

logger = logging.getLogger(__name__)

LATEST = "latest"

_SNAPSHOTS_ADAPTER: TypeAdapter[list[Snapshot]] = TypeAdapter(list[Snapshot])

# One lock per blob store, shared by every repository built over it.
_STORE_LOCKS: weakref.WeakKeyDictionary[BlobStore, threading.Lock] = weakref.WeakKeyDictionary()
_STORE_LOCKS_GUARD = threading.Lock()


def _lock_for(blob_store: BlobStore) -> threading.Lock:
    with _STORE_LOCKS_GUARD:
        lock = _STORE_LOCKS.get(blob_store)
        if lock is None:
            lock = threading.Lock()
            _STORE_LOCKS[blob_store] = lock
        return lock


def encode_snapshots(snapshots: list[Snapshot]) -> str:
    return _SNAPSHOTS_ADAPTER.dump_json(snapshots).decode("utf-8")


def decode_snapshots(raw: str) -> list[Snapshot]:
    try:
        return _SNAPSHOTS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise BlobDecodeError("Stored snapshots could not be decoded.") from exc


class SnapshotRepository:
    """
    Ordered snapshot collection on top of a :class:`BlobStore`.

    Every call reads the blob afresh; writes replace the whole list.
    Read-modify-write cycles are serialized per blob store within one
    process, so repositories built per request over the same store do not
    lose each other's writes.
    """

    def __init__(self, blob_store: BlobStore, *, key: str = "adprofit_snapshots_v3") -> None:
        self._blob_store = blob_store
        self._key = key
        self._lock = _lock_for(blob_store)

    def _load(self) -> list[Snapshot]:
        raw = self._blob_store.get(self._key)
        if not raw:
            return []
        return decode_snapshots(raw)

    def _save(self, snapshots: list[Snapshot]) -> None:
        self._blob_store.set(self._key, encode_snapshots(snapshots))

    def list_all(self) -> list[Snapshot]:
        return self._load()

    def get(self, snapshot_id: str) -> Snapshot | None:
        for snapshot in self._load():
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def latest(self) -> Snapshot | None:
        snapshots = self._load()
        return snapshots[0] if snapshots else None

    def resolve(self, selection: str) -> Snapshot | None:
        """
        Return the latest snapshot for ``"latest"``, otherwise look up by id.
        """
        if selection == LATEST:
            return self.latest()
        return self.get(selection)

    def add(self, snapshot: Snapshot) -> Snapshot:
        """
        Put *snapshot* at the front of the store.
        """
        with self._lock:
            snapshots = self._load()
            if any(existing.id == snapshot.id for existing in snapshots):
                raise ValueError(f"Snapshot {snapshot.id!r} already exists.")
            self._save([snapshot, *snapshots])
        logger.info("Stored snapshot id=%s label=%r total=%d", snapshot.id, snapshot.label, len(snapshots) + 1)
        return snapshot

    def remove(self, snapshot_id: str) -> bool:
        with self._lock:
            snapshots = self._load()
            remaining = [snapshot for snapshot in snapshots if snapshot.id != snapshot_id]
            if len(remaining) == len(snapshots):
                return False
            self._save(remaining)
        logger.info("Deleted snapshot id=%s remaining=%d", snapshot_id, len(remaining))
        return True

    def clear(self) -> int:
        with self._lock:
            removed = len(self._load())
            self._save([])
        logger.info("Cleared snapshot store removed=%d", removed)
        return removed

"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service wiring.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, File, HTTPException, UploadFile, status

from app.config import get_adprofit_settings, get_storage_settings
from app.domain.reconciliation import Snapshot
from app.repositories.settings_repository import SettingsRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.import_service import SnapshotImportService
from db.repositories.blob_store import BlobStore, create_blob_store
from db.repositories.errors import BlobStoreError

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def _validate_csv_upload(file: UploadFile | None) -> UploadFile | None:
    """
    Validate that an uploaded file is a CSV by extension or MIME type.
    A missing or unnamed part means the report was not supplied.
    """

    if file is None or not (file.filename or "").strip():
        return None

    filename = file.filename.strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only CSV files are allowed: {file.filename}",
        )

    return file


def get_content_upload(content_file: UploadFile | None = File(None)) -> UploadFile | None:
    return _validate_csv_upload(content_file)


def get_spend_upload(spend_file: UploadFile | None = File(None)) -> UploadFile | None:
    return _validate_csv_upload(spend_file)


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    """
    Return the process-wide blob store selected by ``ADPROFIT_BLOB_BACKEND``.
    """

    settings = get_storage_settings()
    return create_blob_store(settings.backend, blob_dir=settings.blob_dir)


def get_snapshot_repository(blob_store: BlobStore = Depends(get_blob_store)) -> SnapshotRepository:
    return SnapshotRepository(blob_store, key=get_storage_settings().snapshots_key)


def get_settings_repository(blob_store: BlobStore = Depends(get_blob_store)) -> SettingsRepository:
    return SettingsRepository(
        blob_store,
        key=get_storage_settings().settings_key,
        default_exchange_rate=get_adprofit_settings().default_exchange_rate,
    )


def get_import_service(
    snapshots: SnapshotRepository = Depends(get_snapshot_repository),
    settings: SettingsRepository = Depends(get_settings_repository),
) -> SnapshotImportService:
    return SnapshotImportService(snapshots=snapshots, settings=settings)


def load_snapshot_or_404(repository: SnapshotRepository, selection: str) -> Snapshot:
    """
    Resolve ``"latest"`` or a snapshot id, mapping misses to 404 and
    storage failures to 503.
    """

    try:
        snapshot = repository.resolve(selection)
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Snapshot {selection!r} not found.",
        )
    return snapshot


def load_all_snapshots(repository: SnapshotRepository) -> list[Snapshot]:
    try:
        return repository.list_all()
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc


def storage_unavailable(exc: BlobStoreError) -> HTTPException:
    logger.error("Blob store failure: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Snapshot storage is unavailable.",
    )

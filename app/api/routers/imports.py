"""
app/api/routers/imports.py

Report import HTTP endpoint.

POST /imports   multipart form
    content_file   optional content-revenue CSV
    spend_file     optional ad-spend CSV
    label          optional display label
    snapshot_date  optional business date (YYYY-MM-DD), defaults to today
    period         reporting period tag, defaults to "monthly"

At least one file must be supplied. The response always carries the
extraction diagnostics so a wrong export format is visible to the caller.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status

from app.api.dependencies import (
    get_content_upload,
    get_import_service,
    get_spend_upload,
    storage_unavailable,
)
from app.schemas.imports import ImportSummaryResponse
from app.services.import_service import (
    ImportValidationError,
    ReportDecodeError,
    SnapshotImportService,
    decode_upload,
)
from db.repositories.errors import BlobStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["imports"])


def _read_upload(file: UploadFile | None, report_name: str) -> str | None:
    if file is None:
        return None
    try:
        return decode_upload(file.file.read(), report_name=report_name)
    finally:
        file.file.close()


@router.post(
    "/imports",
    response_model=ImportSummaryResponse,
    status_code=status.HTTP_201_CREATED,
)
def import_reports(
    content_file: UploadFile | None = Depends(get_content_upload),
    spend_file: UploadFile | None = Depends(get_spend_upload),
    label: str | None = Form(default=None),
    snapshot_date: date | None = Form(default=None),
    period: str = Form(default="monthly"),
    import_service: SnapshotImportService = Depends(get_import_service),
) -> ImportSummaryResponse:
    """
    Reconcile the uploaded reports into a new snapshot and store it.
    """

    try:
        content_text = _read_upload(content_file, "content_file")
        spend_text = _read_upload(spend_file, "spend_file")
        summary = import_service.import_reports(
            content_text,
            spend_text,
            label=label,
            snapshot_date=snapshot_date,
            period=period,
        )
    except (ReportDecodeError, ImportValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Import failed label=%r", label)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Import failed; see server logs for details.",
        ) from exc

    return ImportSummaryResponse.model_validate(summary)

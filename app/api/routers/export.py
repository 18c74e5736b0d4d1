"""
app/api/routers/export.py

CSV download endpoints.

GET /export/snapshots/{snapshot_id}                   spending URLs of one snapshot
GET /export/snapshots/{snapshot_id}/status/{status}   one action bucket
GET /export/range                                     a date-range roll-up

``{snapshot_id}`` accepts ``latest``. Filters and sort parameters mirror the
JSON endpoints so the file matches what is on screen.

All formatting lives in ExportService; the router only handles HTTP plumbing.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_snapshot_repository, load_all_snapshots, load_snapshot_or_404
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.aggregation_service import AggregationService, get_aggregation_service
from app.services.export_service import ExportResult, ExportService, get_export_service, render_csv
from profitability.classifier import URLStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/export", tags=["export"])


def _to_csv_download(result: ExportResult, filename: str) -> StreamingResponse:
    """Return *result* as a UTF-8 CSV file download."""
    return StreamingResponse(
        content=iter([render_csv(result)]),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


@router.get("/snapshots/{snapshot_id}", summary="Export one snapshot as CSV")
def export_snapshot(
    snapshot_id: str,
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    sort_by: str = Query(default="profit"),
    sort_dir: str = Query(default="desc"),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
    exporter: ExportService = Depends(get_export_service),
) -> StreamingResponse:
    snapshot = load_snapshot_or_404(repository, snapshot_id)
    try:
        urls = aggregation.spending_urls(
            snapshot,
            status=status_filter,
            search=search,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    result = exporter.snapshot_rows(urls)
    logger.info("Snapshot export id=%s rows=%d", snapshot.id, len(result.rows))
    return _to_csv_download(result, f"adprofit-{snapshot.date.isoformat()}.csv")


@router.get("/snapshots/{snapshot_id}/status/{url_status}", summary="Export one action bucket as CSV")
def export_status_bucket(
    snapshot_id: str,
    url_status: str,
    search: str | None = Query(default=None),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
    exporter: ExportService = Depends(get_export_service),
) -> StreamingResponse:
    if url_status not in URLStatus.ALL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status {url_status!r}. Must be one of: {list(URLStatus.ALL)}.",
        )
    snapshot = load_snapshot_or_404(repository, snapshot_id)
    bucket = aggregation.status_buckets(snapshot, search=search)[url_status]

    result = exporter.bucket_rows(bucket.urls)
    logger.info("Bucket export id=%s status=%s rows=%d", snapshot.id, url_status, len(result.rows))
    return _to_csv_download(result, f"{url_status}-urls-{snapshot.date.isoformat()}.csv")


@router.get("/range", summary="Export a date-range roll-up as CSV")
def export_range(
    date_from: date = Query(...),
    date_to: date = Query(...),
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    sort_by: str = Query(default="profit"),
    sort_dir: str = Query(default="desc"),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
    exporter: ExportService = Depends(get_export_service),
) -> StreamingResponse:
    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be later than date_to.",
        )
    try:
        range_result = aggregation.date_range(
            load_all_snapshots(repository),
            date_from=date_from,
            date_to=date_to,
            status=status_filter,
            search=search,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    result = exporter.range_rows(range_result.urls)
    logger.info("Range export from=%s to=%s rows=%d", date_from, date_to, len(result.rows))
    return _to_csv_download(result, f"adprofit-{date_from.isoformat()}-to-{date_to.isoformat()}.csv")

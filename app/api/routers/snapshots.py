"""
app/api/routers/snapshots.py

Snapshot store and single-snapshot view endpoints.

Every ``{snapshot_id}`` accepts either an id or the literal ``latest``
(the most recently imported snapshot).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import (
    get_snapshot_repository,
    load_all_snapshots,
    load_snapshot_or_404,
    storage_unavailable,
)
from app.repositories.snapshot_repository import SnapshotRepository
from app.schemas.snapshots import (
    ReconciledURLResponse,
    SnapshotDeleteResponse,
    SnapshotHeaderResponse,
    SnapshotListResponse,
    SnapshotResponse,
    SnapshotSummaryResponse,
    StatusBucketResponse,
)
from app.services.aggregation_service import AggregationService, get_aggregation_service
from db.repositories.errors import BlobStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


@router.get("", response_model=SnapshotListResponse)
def list_snapshots(
    repository: SnapshotRepository = Depends(get_snapshot_repository),
) -> SnapshotListResponse:
    """
    List stored snapshots, most recently imported first, without URL rows.
    """

    snapshots = load_all_snapshots(repository)
    return SnapshotListResponse(
        count=len(snapshots),
        snapshots=[SnapshotHeaderResponse.model_validate(snapshot) for snapshot in snapshots],
    )


@router.delete("", response_model=SnapshotDeleteResponse)
def clear_snapshots(
    repository: SnapshotRepository = Depends(get_snapshot_repository),
) -> SnapshotDeleteResponse:
    try:
        removed = repository.clear()
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    return SnapshotDeleteResponse(deleted=removed)


@router.get("/{snapshot_id}", response_model=SnapshotResponse)
def get_snapshot(
    snapshot_id: str,
    repository: SnapshotRepository = Depends(get_snapshot_repository),
) -> SnapshotResponse:
    return SnapshotResponse.model_validate(load_snapshot_or_404(repository, snapshot_id))


@router.delete("/{snapshot_id}", response_model=SnapshotDeleteResponse)
def delete_snapshot(
    snapshot_id: str,
    repository: SnapshotRepository = Depends(get_snapshot_repository),
) -> SnapshotDeleteResponse:
    snapshot = load_snapshot_or_404(repository, snapshot_id)
    try:
        removed = repository.remove(snapshot.id)
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Snapshot {snapshot_id!r} not found.",
        )
    return SnapshotDeleteResponse(deleted=1)


@router.get("/{snapshot_id}/urls", response_model=list[ReconciledURLResponse])
def list_spending_urls(
    snapshot_id: str,
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, description="Case-insensitive slug/campaign match."),
    sort_by: str = Query(default="profit"),
    sort_dir: str = Query(default="desc"),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> list[ReconciledURLResponse]:
    """
    Spending URLs of one snapshot, filtered and sorted for display.
    """

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
    return [ReconciledURLResponse.model_validate(url) for url in urls]


@router.get("/{snapshot_id}/summary", response_model=SnapshotSummaryResponse)
def get_snapshot_summary(
    snapshot_id: str,
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> SnapshotSummaryResponse:
    snapshot = load_snapshot_or_404(repository, snapshot_id)
    return SnapshotSummaryResponse.model_validate(aggregation.snapshot_summary(snapshot))


@router.get("/{snapshot_id}/buckets", response_model=dict[str, StatusBucketResponse])
def get_status_buckets(
    snapshot_id: str,
    search: str | None = Query(default=None, description="Case-insensitive slug/campaign match."),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> dict[str, StatusBucketResponse]:
    """
    Spending URLs grouped into the four action buckets, optionally narrowed
    by a slug or campaign search.
    """

    snapshot = load_snapshot_or_404(repository, snapshot_id)
    return {
        name: StatusBucketResponse.model_validate(bucket)
        for name, bucket in aggregation.status_buckets(snapshot, search=search).items()
    }

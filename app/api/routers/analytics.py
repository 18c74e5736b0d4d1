"""
app/api/routers/analytics.py

Multi-snapshot analytics endpoints.

GET /analytics/monthly-trend             snapshot totals per calendar month
GET /analytics/range                     per-slug roll-up over a date range
GET /analytics/urls/{slug}/history       one slug across every snapshot
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_snapshot_repository, load_all_snapshots
from app.repositories.snapshot_repository import SnapshotRepository
from app.schemas.analytics import (
    DateRangeResponse,
    MonthBucketResponse,
    MonthlyTrendResponse,
    URLHistoryEntryResponse,
    URLHistoryResponse,
)
from app.services.aggregation_service import AggregationService, get_aggregation_service
from app.services.reconciliation_service import normalize_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/monthly-trend", response_model=MonthlyTrendResponse)
def monthly_trend(
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> MonthlyTrendResponse:
    buckets = aggregation.monthly_trend(load_all_snapshots(repository))
    return MonthlyTrendResponse(
        months=[MonthBucketResponse.model_validate(bucket) for bucket in buckets]
    )


@router.get("/range", response_model=DateRangeResponse)
def date_range(
    date_from: date = Query(..., description="Inclusive start date (YYYY-MM-DD)."),
    date_to: date = Query(..., description="Inclusive end date (YYYY-MM-DD)."),
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    sort_by: str = Query(default="profit"),
    sort_dir: str = Query(default="desc"),
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> DateRangeResponse:
    """
    Sum every spending URL of every snapshot dated within the range.

    ``totals`` is null when no snapshot matched.
    """

    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be later than date_to.",
        )
    try:
        result = aggregation.date_range(
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
    return DateRangeResponse.model_validate(result)


@router.get("/urls/{slug:path}/history", response_model=URLHistoryResponse)
def url_history(
    slug: str,
    repository: SnapshotRepository = Depends(get_snapshot_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> URLHistoryResponse:
    slug = normalize_slug(slug)
    entries = aggregation.url_history(load_all_snapshots(repository), slug)
    return URLHistoryResponse(
        slug=slug,
        entries=[URLHistoryEntryResponse.model_validate(entry) for entry in entries],
    )

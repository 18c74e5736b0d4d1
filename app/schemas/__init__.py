"""
app/schemas package marker.
"""

from app.schemas.analytics import (
    DateRangeResponse,
    MonthlyTrendResponse,
    URLHistoryResponse,
)
from app.schemas.imports import ImportSummaryResponse, ReportParseResponse
from app.schemas.settings import SettingsResponse, SettingsUpdateRequest
from app.schemas.snapshots import (
    ReconciledURLResponse,
    SnapshotDeleteResponse,
    SnapshotHeaderResponse,
    SnapshotListResponse,
    SnapshotResponse,
    SnapshotSummaryResponse,
    StatusBucketResponse,
)

__all__ = [
    "DateRangeResponse",
    "ImportSummaryResponse",
    "MonthlyTrendResponse",
    "ReconciledURLResponse",
    "ReportParseResponse",
    "SettingsResponse",
    "SettingsUpdateRequest",
    "SnapshotDeleteResponse",
    "SnapshotHeaderResponse",
    "SnapshotListResponse",
    "SnapshotResponse",
    "SnapshotSummaryResponse",
    "StatusBucketResponse",
    "URLHistoryResponse",
]

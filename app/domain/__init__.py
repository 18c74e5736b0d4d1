"""
app/domain package marker.
"""

from app.domain.aggregation import (
    DateRangeResult,
    DateRangeTotals,
    DateRangeURL,
    MonthBucket,
    MonthlyBreakdown,
    SnapshotSummary,
    StatusBucket,
    URLHistoryEntry,
)
from app.domain.imports import ImportSummary, ReportParseResult
from app.domain.reconciliation import (
    AdRow,
    ContentRow,
    ReconciledURL,
    Snapshot,
    SnapshotPeriod,
    SnapshotTotals,
    SpendRow,
)

__all__ = [
    "AdRow",
    "ContentRow",
    "DateRangeResult",
    "DateRangeTotals",
    "DateRangeURL",
    "ImportSummary",
    "MonthBucket",
    "MonthlyBreakdown",
    "ReconciledURL",
    "ReportParseResult",
    "Snapshot",
    "SnapshotPeriod",
    "SnapshotSummary",
    "SnapshotTotals",
    "SpendRow",
    "StatusBucket",
    "URLHistoryEntry",
]

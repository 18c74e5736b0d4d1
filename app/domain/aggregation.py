"""
app/domain/aggregation.py

Result containers returned by the aggregation service.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from app.domain.reconciliation import ReconciledURL, SnapshotTotals


@dataclass(frozen=True)
class MonthBucket:
    """
    Totals of every snapshot dated within one calendar month.

    Status counts only include URLs with spend.
    """

    month: str
    content_revenue: float = 0.0
    spend_target_currency: float = 0.0
    spend_source_currency: float = 0.0
    profit: float = 0.0
    clicks: int = 0
    impressions: int = 0
    snapshot_count: int = 0
    spending_url_count: int = 0
    profitable: int = 0
    losing: int = 0
    turnoff: int = 0
    roi: float = 0.0


@dataclass(frozen=True)
class DateRangeURL:
    """
    One slug's spend and revenue summed over every snapshot in a date range.
    """

    slug: str
    content_revenue: float
    spend_target_currency: float
    spend_source_currency: float
    clicks: int
    impressions: int
    campaigns: tuple[str, ...]
    appearances: int
    months_active: tuple[str, ...]
    per_month_profit: dict[str, float]
    profit: float
    roi: float
    revenue_per_click: float
    cost_per_click: float
    status: str
    trend: str

    @property
    def month_count(self) -> int:
        return len(self.months_active)


@dataclass(frozen=True)
class DateRangeTotals:
    """
    Range-wide totals over every spending URL, before display filters.
    """

    content_revenue: float = 0.0
    spend_target_currency: float = 0.0
    spend_source_currency: float = 0.0
    profit: float = 0.0
    clicks: int = 0
    url_count: int = 0
    profitable: int = 0
    improving: int = 0
    losing: int = 0
    turnoff: int = 0
    roi: float = 0.0


@dataclass(frozen=True)
class MonthlyBreakdown:
    month: str
    content_revenue: float = 0.0
    spend_target_currency: float = 0.0
    spend_source_currency: float = 0.0
    profit: float = 0.0
    clicks: int = 0
    roi: float = 0.0


@dataclass(frozen=True)
class DateRangeResult:
    """
    Date-range aggregation output.

    ``totals`` is ``None`` only when no snapshot fell inside the range,
    which keeps "nothing matched" distinct from "matched, zero URLs".
    """

    date_from: dt.date
    date_to: dt.date
    urls: list[DateRangeURL] = field(default_factory=list)
    totals: DateRangeTotals | None = None
    snapshots_used: int = 0
    monthly_breakdown: list[MonthlyBreakdown] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.snapshots_used == 0


@dataclass(frozen=True)
class URLHistoryEntry:
    snapshot_id: str
    date: dt.date
    label: str
    period: str
    url: ReconciledURL


@dataclass(frozen=True)
class SnapshotSummary:
    """
    Headline figures for one snapshot. Status counts cover spending URLs only.
    """

    snapshot_id: str
    totals: SnapshotTotals
    profitable: int = 0
    improving: int = 0
    losing: int = 0
    turnoff: int = 0
    average_roi: float = 0.0
    wasted_spend: float = 0.0


@dataclass(frozen=True)
class StatusBucket:
    status: str
    urls: list[ReconciledURL] = field(default_factory=list)
    total_spend: float = 0.0
    total_profit: float = 0.0

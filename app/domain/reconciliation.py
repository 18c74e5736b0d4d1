"""
app/domain/reconciliation.py

Typed records produced by the report extractors and the reconciliation engine.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field


class SnapshotPeriod:
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    BI_MONTHLY = "bi-monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    ALL: tuple[str, ...] = (DAILY, WEEKLY, MONTHLY, BI_MONTHLY, QUARTERLY, YEARLY)


@dataclass(frozen=True)
class ContentRow:
    """
    One content-revenue report row. Revenue figures are in the target currency.

    Missing pages are represented by a zero-filled instance.
    """

    slug: str
    views: int = 0
    revenue: float = 0.0
    rpm: float = 0.0
    cpm: float = 0.0
    viewability: float = 0.0
    fill_rate: float = 0.0
    impressions_per_view: float = 0.0


@dataclass(frozen=True)
class SpendRow:
    """
    One ad-spend report data line, before aggregation by landing page.
    """

    landing_page: str
    campaign: str = ""
    clicks: int = 0
    impressions: int = 0
    cost: float = 0.0
    avg_cpc: float = 0.0
    ctr: float = 0.0


@dataclass(frozen=True)
class AdRow:
    """
    Spend for one landing page summed across every campaign targeting it.

    ``cost_source_currency`` is in the ad platform's billing currency.
    """

    slug: str
    campaigns: tuple[str, ...] = ()
    clicks: int = 0
    impressions: int = 0
    cost_source_currency: float = 0.0


@dataclass(frozen=True)
class ReconciledURL:
    """
    Joined financial record for one slug of one snapshot.
    """

    slug: str
    status: str
    profit: float
    roi: float
    revenue_per_click: float
    cost_per_click: float
    content: ContentRow
    spend: AdRow
    cost_target_currency: float
    has_spend: bool

    @property
    def revenue(self) -> float:
        return self.content.revenue


@dataclass(frozen=True)
class SnapshotTotals:
    content_revenue: float = 0.0
    spend_source_currency: float = 0.0
    spend_target_currency: float = 0.0
    clicks: int = 0
    impressions: int = 0
    total_profit: float = 0.0
    url_count: int = 0
    spending_url_count: int = 0


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable result of one import.

    ``date`` drives every time bucket; ``created_at`` is informational only.
    ``exchange_rate`` is the rate the spend figures were converted with.
    """

    id: str
    label: str
    date: dt.date
    period: str
    created_at: dt.datetime
    exchange_rate: float
    urls: tuple[ReconciledURL, ...] = ()
    totals: SnapshotTotals = field(default_factory=SnapshotTotals)

    @property
    def month(self) -> str:
        return self.date.strftime("%Y-%m")

    def find(self, slug: str) -> ReconciledURL | None:
        for url in self.urls:
            if url.slug == slug:
                return url
        return None

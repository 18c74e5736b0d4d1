"""
app/services/aggregation_service.py

Roll-ups over the snapshot store.

Every query recomputes from the full snapshot list it is handed; nothing is
cached and the snapshots are never mutated.

Views
-----
monthly_trend       snapshot totals summed per calendar month of ``date``,
                    oldest first, last N months only.
date_range          spending URLs of every snapshot dated in [from, to],
                    summed per slug, re-derived from the summed figures.
url_history         one slug's record in each snapshot, in store order.
spending_urls       the filtered/sorted display list of one snapshot.
snapshot_summary    headline figures and status counts of one snapshot.
status_buckets      one snapshot's spending URLs grouped by status.

Status counts and per-slug roll-ups only consider URLs with spend; totals
copied from ``Snapshot.totals`` cover every URL.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from typing import Any, TypeVar

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
from app.domain.reconciliation import ReconciledURL, Snapshot
from profitability.classifier import (
    URLStatus,
    classify_status,
    classify_trend,
    compute_roi,
    per_click,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SORT_DESC = "desc"
SORT_ASC = "asc"

SNAPSHOT_SORT_KEYS: dict[str, Callable[[ReconciledURL], Any]] = {
    "profit": lambda url: url.profit,
    "revenue": lambda url: url.content.revenue,
    "spend": lambda url: url.cost_target_currency,
    "roi": lambda url: url.roi,
    "clicks": lambda url: url.spend.clicks,
    "rpc": lambda url: url.revenue_per_click,
    "slug": lambda url: url.slug,
}

RANGE_SORT_KEYS: dict[str, Callable[[DateRangeURL], Any]] = {
    "profit": lambda url: url.profit,
    "revenue": lambda url: url.content_revenue,
    "spend": lambda url: url.spend_target_currency,
    "roi": lambda url: url.roi,
    "clicks": lambda url: url.clicks,
    "appearances": lambda url: url.appearances,
    "slug": lambda url: url.slug,
}


def _ratio_roi(profit: float, spend: float) -> float:
    """ROI for aggregate totals: 0 rather than the unbounded marker when unspent."""
    return profit / spend * 100 if spend > 0 else 0.0


def _matches_search(slug: str, campaigns: Iterable[str], search: str | None) -> bool:
    if not search:
        return True
    needle = search.lower()
    return needle in slug.lower() or any(needle in campaign.lower() for campaign in campaigns)


def _sorted(
    items: Iterable[T],
    keys: dict[str, Callable[[T], Any]],
    sort_by: str,
    sort_dir: str,
) -> list[T]:
    if sort_dir not in (SORT_ASC, SORT_DESC):
        raise ValueError(f"Unknown sort direction {sort_dir!r}. Use 'asc' or 'desc'.")
    key = keys.get(sort_by, keys["slug"])
    return sorted(items, key=key, reverse=sort_dir == SORT_DESC)


def _check_status(status: str | None) -> None:
    if status is not None and status not in URLStatus.ALL:
        raise ValueError(f"Unknown status {status!r}. Allowed values: {list(URLStatus.ALL)}.")


@dataclass
class _MonthAccumulator:
    content_revenue: float = 0.0
    spend_target: float = 0.0
    spend_source: float = 0.0
    profit: float = 0.0
    clicks: int = 0
    impressions: int = 0
    snapshot_count: int = 0
    spending_url_count: int = 0
    profitable: int = 0
    losing: int = 0
    turnoff: int = 0


@dataclass
class _SlugAccumulator:
    content_revenue: float = 0.0
    spend_target: float = 0.0
    spend_source: float = 0.0
    clicks: int = 0
    impressions: int = 0
    campaigns: list[str] = field(default_factory=list)
    appearances: int = 0
    months: set[str] = field(default_factory=set)
    per_month_profit: dict[str, float] = field(default_factory=dict)

    def add(self, url: ReconciledURL, month: str) -> None:
        self.content_revenue += url.content.revenue
        self.spend_target += url.cost_target_currency
        self.spend_source += url.spend.cost_source_currency
        self.clicks += url.spend.clicks
        self.impressions += url.spend.impressions
        self.appearances += 1
        self.months.add(month)
        for campaign in url.spend.campaigns:
            if campaign not in self.campaigns:
                self.campaigns.append(campaign)
        month_profit = url.content.revenue - url.cost_target_currency
        self.per_month_profit[month] = self.per_month_profit.get(month, 0.0) + month_profit

    def finish(self, slug: str) -> DateRangeURL:
        profit = self.content_revenue - self.spend_target
        return DateRangeURL(
            slug=slug,
            content_revenue=self.content_revenue,
            spend_target_currency=self.spend_target,
            spend_source_currency=self.spend_source,
            clicks=self.clicks,
            impressions=self.impressions,
            campaigns=tuple(self.campaigns),
            appearances=self.appearances,
            months_active=tuple(sorted(self.months)),
            per_month_profit=dict(sorted(self.per_month_profit.items())),
            profit=profit,
            roi=compute_roi(self.spend_target, self.content_revenue),
            revenue_per_click=per_click(self.content_revenue, self.clicks),
            cost_per_click=per_click(self.spend_target, self.clicks),
            status=classify_status(self.spend_target, self.content_revenue),
            trend=classify_trend(self.per_month_profit),
        )


class AggregationService:
    """
    Stateless, read-only queries over a newest-first list of snapshots.

    Parameters
    ----------
    trend_months:
        Number of most recent month buckets kept by :meth:`monthly_trend`.
    """

    def __init__(self, *, trend_months: int = 12) -> None:
        self._trend_months = max(1, trend_months)

    # ------------------------------------------------------------------
    # Multi-snapshot views
    # ------------------------------------------------------------------

    def monthly_trend(self, snapshots: Sequence[Snapshot]) -> list[MonthBucket]:
        """
        Sum snapshot totals per month of ``Snapshot.date``.

        Several snapshots in one month are added together, not averaged.
        Returns at most ``trend_months`` buckets, oldest first.
        """
        months: dict[str, _MonthAccumulator] = {}
        for snapshot in snapshots:
            acc = months.setdefault(snapshot.month, _MonthAccumulator())
            totals = snapshot.totals
            acc.content_revenue += totals.content_revenue
            acc.spend_target += totals.spend_target_currency
            acc.spend_source += totals.spend_source_currency
            acc.profit += totals.total_profit
            acc.clicks += totals.clicks
            acc.impressions += totals.impressions
            acc.spending_url_count += totals.spending_url_count
            acc.snapshot_count += 1
            for url in snapshot.urls:
                if not url.has_spend:
                    continue
                if url.status == URLStatus.PROFITABLE:
                    acc.profitable += 1
                elif url.status == URLStatus.LOSING:
                    acc.losing += 1
                elif url.status == URLStatus.TURNOFF:
                    acc.turnoff += 1

        buckets = [
            MonthBucket(
                month=month,
                content_revenue=acc.content_revenue,
                spend_target_currency=acc.spend_target,
                spend_source_currency=acc.spend_source,
                profit=acc.profit,
                clicks=acc.clicks,
                impressions=acc.impressions,
                snapshot_count=acc.snapshot_count,
                spending_url_count=acc.spending_url_count,
                profitable=acc.profitable,
                losing=acc.losing,
                turnoff=acc.turnoff,
                roi=_ratio_roi(acc.profit, acc.spend_target),
            )
            for month, acc in sorted(months.items())
        ]
        return buckets[-self._trend_months:]

    def date_range(
        self,
        snapshots: Sequence[Snapshot],
        *,
        date_from: date,
        date_to: date,
        status: str | None = None,
        search: str | None = None,
        sort_by: str = "profit",
        sort_dir: str = SORT_DESC,
    ) -> DateRangeResult:
        """
        Aggregate spending URLs of every snapshot with ``date_from <= date <= date_to``.

        Ratios, status and trend are derived from the summed figures, never
        averaged across snapshots. ``status`` / ``search`` / sort only shape
        ``urls``; ``totals`` always covers every aggregated slug.
        """
        _check_status(status)
        matching = [s for s in snapshots if date_from <= s.date <= date_to]
        if not matching:
            logger.debug("Date range matched no snapshots from=%s to=%s", date_from, date_to)
            return DateRangeResult(date_from=date_from, date_to=date_to)

        slugs: dict[str, _SlugAccumulator] = {}
        months: dict[str, _MonthAccumulator] = {}
        for snapshot in matching:
            month = snapshot.month
            month_acc = months.setdefault(month, _MonthAccumulator())
            for url in snapshot.urls:
                if not url.has_spend:
                    continue
                slugs.setdefault(url.slug, _SlugAccumulator()).add(url, month)
                month_acc.content_revenue += url.content.revenue
                month_acc.spend_target += url.cost_target_currency
                month_acc.spend_source += url.spend.cost_source_currency
                month_acc.profit += url.profit
                month_acc.clicks += url.spend.clicks

        all_urls = [acc.finish(slug) for slug, acc in slugs.items()]
        totals = self._range_totals(all_urls)

        visible = [
            url
            for url in all_urls
            if (status is None or url.status == status)
            and _matches_search(url.slug, url.campaigns, search)
        ]
        breakdown = [
            MonthlyBreakdown(
                month=month,
                content_revenue=acc.content_revenue,
                spend_target_currency=acc.spend_target,
                spend_source_currency=acc.spend_source,
                profit=acc.profit,
                clicks=acc.clicks,
                roi=_ratio_roi(acc.profit, acc.spend_target),
            )
            for month, acc in sorted(months.items())
        ]
        logger.debug(
            "Date range from=%s to=%s snapshots=%d urls=%d visible=%d",
            date_from,
            date_to,
            len(matching),
            len(all_urls),
            len(visible),
        )
        return DateRangeResult(
            date_from=date_from,
            date_to=date_to,
            urls=_sorted(visible, RANGE_SORT_KEYS, sort_by, sort_dir),
            totals=totals,
            snapshots_used=len(matching),
            monthly_breakdown=breakdown,
        )

    def url_history(self, snapshots: Sequence[Snapshot], slug: str) -> list[URLHistoryEntry]:
        """
        Collect *slug* from every snapshot that contains it, in store order.
        """
        history: list[URLHistoryEntry] = []
        for snapshot in snapshots:
            url = snapshot.find(slug)
            if url is None:
                continue
            history.append(
                URLHistoryEntry(
                    snapshot_id=snapshot.id,
                    date=snapshot.date,
                    label=snapshot.label,
                    period=snapshot.period,
                    url=url,
                )
            )
        return history

    # ------------------------------------------------------------------
    # Single-snapshot views
    # ------------------------------------------------------------------

    def spending_urls(
        self,
        snapshot: Snapshot,
        *,
        status: str | None = None,
        search: str | None = None,
        sort_by: str = "profit",
        sort_dir: str = SORT_DESC,
    ) -> list[ReconciledURL]:
        _check_status(status)
        urls = [
            url
            for url in snapshot.urls
            if url.has_spend
            and (status is None or url.status == status)
            and _matches_search(url.slug, url.spend.campaigns, search)
        ]
        return _sorted(urls, SNAPSHOT_SORT_KEYS, sort_by, sort_dir)

    def snapshot_summary(self, snapshot: Snapshot) -> SnapshotSummary:
        counts = {status: 0 for status in URLStatus.ALL}
        wasted = 0.0
        for url in snapshot.urls:
            if not url.has_spend:
                continue
            counts[url.status] += 1
            if url.status == URLStatus.TURNOFF:
                wasted += url.cost_target_currency
        totals = snapshot.totals
        return SnapshotSummary(
            snapshot_id=snapshot.id,
            totals=totals,
            profitable=counts[URLStatus.PROFITABLE],
            improving=counts[URLStatus.IMPROVING],
            losing=counts[URLStatus.LOSING],
            turnoff=counts[URLStatus.TURNOFF],
            average_roi=_ratio_roi(totals.total_profit, totals.spend_target_currency),
            wasted_spend=wasted,
        )

    def status_buckets(self, snapshot: Snapshot, *, search: str | None = None) -> dict[str, StatusBucket]:
        """
        Group spending URLs by status, worst first within each bucket
        except Profitable, which lists the biggest earners first. *search*
        narrows every bucket (and its totals) to matching slugs or campaigns.
        """
        buckets: dict[str, StatusBucket] = {}
        for status in (URLStatus.TURNOFF, URLStatus.LOSING, URLStatus.IMPROVING, URLStatus.PROFITABLE):
            urls = [
                url
                for url in snapshot.urls
                if url.has_spend
                and url.status == status
                and _matches_search(url.slug, url.spend.campaigns, search)
            ]
            urls.sort(key=lambda url: url.profit, reverse=status == URLStatus.PROFITABLE)
            buckets[status] = StatusBucket(
                status=status,
                urls=urls,
                total_spend=sum(url.cost_target_currency for url in urls),
                total_profit=sum(url.profit for url in urls),
            )
        return buckets

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _range_totals(self, urls: Sequence[DateRangeURL]) -> DateRangeTotals:
        counts = {status: 0 for status in URLStatus.ALL}
        for url in urls:
            counts[url.status] += 1
        revenue = sum(url.content_revenue for url in urls)
        spend_target = sum(url.spend_target_currency for url in urls)
        profit = sum(url.content_revenue - url.spend_target_currency for url in urls)
        return DateRangeTotals(
            content_revenue=revenue,
            spend_target_currency=spend_target,
            spend_source_currency=sum(url.spend_source_currency for url in urls),
            profit=profit,
            clicks=sum(url.clicks for url in urls),
            url_count=len(urls),
            profitable=counts[URLStatus.PROFITABLE],
            improving=counts[URLStatus.IMPROVING],
            losing=counts[URLStatus.LOSING],
            turnoff=counts[URLStatus.TURNOFF],
            roi=_ratio_roi(profit, spend_target),
        )


@lru_cache(maxsize=1)
def get_aggregation_service() -> AggregationService:
    from app.config import get_adprofit_settings

    return AggregationService(trend_months=get_adprofit_settings().trend_months)

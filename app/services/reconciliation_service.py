"""
app/services/reconciliation_service.py

Joins content-revenue rows and ad-spend rows by slug into one Snapshot.

Algorithm
---------
1. Content rows are keyed by slug with one leading and one trailing slash
   removed. A repeated slug replaces the earlier row.
2. Spend rows are keyed by the landing-page path (scheme and host removed,
   then the same slash trimming). Rows sharing a slug are summed and their
   campaign names are merged in first-seen order.
3. The union of both key sets, content slugs first, is the snapshot's URL
   list. The side a slug is missing from is zero-filled.
4. Spend is converted to the target currency with the exchange rate passed
   in; the rate is stored on the snapshot and never re-applied later.

The engine is pure: it reads its inputs, never mutates them and performs no
I/O. Storing the snapshot is the caller's job.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from app.domain.reconciliation import (
    AdRow,
    ContentRow,
    ReconciledURL,
    Snapshot,
    SnapshotPeriod,
    SnapshotTotals,
    SpendRow,
)
from profitability.classifier import classify_status, compute_roi, per_click

logger = logging.getLogger(__name__)

_SCHEME_AND_HOST = re.compile(r"^https?://[^/]+")
_EDGE_SLASHES = re.compile(r"^/|/$")


class ReconciliationError(ValueError):
    """
    Raised when import metadata or the exchange rate is unusable.
    """


def normalize_slug(raw: str) -> str:
    """
    Trim whitespace, then remove at most one leading and one trailing slash.
    """
    return _EDGE_SLASHES.sub("", (raw or "").strip())


def slug_from_url(url: str) -> str:
    """
    Reduce a landing-page URL to its slug: ``https://site.com/a/b/`` -> ``a/b``.
    """
    return normalize_slug(_SCHEME_AND_HOST.sub("", (url or "").strip()))


def new_snapshot_id(created_at: datetime) -> str:
    """
    Time-ordered id with a random suffix, e.g. ``18f2c3a9b10-4e1a9c``.
    """
    millis = int(created_at.timestamp() * 1000)
    return f"{millis:x}-{uuid.uuid4().hex[:6]}"


@dataclass
class _SpendAccumulator:
    campaigns: list[str] = field(default_factory=list)
    clicks: int = 0
    impressions: int = 0
    cost: float = 0.0

    def add(self, row: SpendRow) -> None:
        self.clicks += row.clicks
        self.impressions += row.impressions
        self.cost += row.cost
        if row.campaign and row.campaign not in self.campaigns:
            self.campaigns.append(row.campaign)

    def to_row(self, slug: str) -> AdRow:
        return AdRow(
            slug=slug,
            campaigns=tuple(self.campaigns),
            clicks=self.clicks,
            impressions=self.impressions,
            cost_source_currency=self.cost,
        )


class ReconciliationService:
    """
    Stateless engine turning two extracted reports into a Snapshot.
    """

    def index_content(self, rows: Iterable[ContentRow]) -> dict[str, ContentRow]:
        content: dict[str, ContentRow] = {}
        for row in rows:
            slug = normalize_slug(row.slug)
            if not slug:
                continue
            content[slug] = ContentRow(
                slug=slug,
                views=row.views,
                revenue=row.revenue,
                rpm=row.rpm,
                cpm=row.cpm,
                viewability=row.viewability,
                fill_rate=row.fill_rate,
                impressions_per_view=row.impressions_per_view,
            )
        return content

    def index_spend(self, rows: Iterable[SpendRow]) -> dict[str, AdRow]:
        accumulators: dict[str, _SpendAccumulator] = {}
        for row in rows:
            slug = slug_from_url(row.landing_page)
            if not slug:
                continue
            accumulators.setdefault(slug, _SpendAccumulator()).add(row)
        return {slug: acc.to_row(slug) for slug, acc in accumulators.items()}

    def reconcile_url(
        self,
        slug: str,
        content: ContentRow | None,
        spend: AdRow | None,
        *,
        exchange_rate: float,
    ) -> ReconciledURL:
        """
        Build the joined record for one slug, zero-filling the absent side.
        """
        content = content or ContentRow(slug=slug)
        spend = spend or AdRow(slug=slug)

        cost_target = spend.cost_source_currency / exchange_rate
        revenue = content.revenue
        return ReconciledURL(
            slug=slug,
            status=classify_status(cost_target, revenue),
            profit=revenue - cost_target,
            roi=compute_roi(cost_target, revenue),
            revenue_per_click=per_click(revenue, spend.clicks),
            cost_per_click=per_click(cost_target, spend.clicks),
            content=content,
            spend=spend,
            cost_target_currency=cost_target,
            has_spend=spend.cost_source_currency > 0,
        )

    def compute_totals(self, urls: Iterable[ReconciledURL]) -> SnapshotTotals:
        content_revenue = 0.0
        spend_source = 0.0
        spend_target = 0.0
        clicks = 0
        impressions = 0
        profit = 0.0
        url_count = 0
        spending = 0
        for url in urls:
            content_revenue += url.content.revenue
            spend_source += url.spend.cost_source_currency
            spend_target += url.cost_target_currency
            clicks += url.spend.clicks
            impressions += url.spend.impressions
            profit += url.profit
            url_count += 1
            if url.has_spend:
                spending += 1
        return SnapshotTotals(
            content_revenue=content_revenue,
            spend_source_currency=spend_source,
            spend_target_currency=spend_target,
            clicks=clicks,
            impressions=impressions,
            total_profit=profit,
            url_count=url_count,
            spending_url_count=spending,
        )

    def reconcile(
        self,
        content_rows: Iterable[ContentRow],
        spend_rows: Iterable[SpendRow],
        *,
        exchange_rate: float,
        label: str | None = None,
        snapshot_date: date | None = None,
        period: str = SnapshotPeriod.MONTHLY,
        created_at: datetime | None = None,
    ) -> Snapshot:
        """
        Join both row sets and return a new, unsaved Snapshot.

        Raises
        ------
        ReconciliationError: non-positive exchange rate or unknown period.
        """
        if not math.isfinite(exchange_rate) or exchange_rate <= 0:
            raise ReconciliationError(
                f"Exchange rate must be a positive number, got {exchange_rate!r}."
            )
        if period not in SnapshotPeriod.ALL:
            raise ReconciliationError(
                f"Unknown period {period!r}. Allowed values: {list(SnapshotPeriod.ALL)}."
            )

        created_at = created_at or datetime.now(timezone.utc)
        content = self.index_content(content_rows)
        spend = self.index_spend(spend_rows)

        slugs = list(content)
        slugs.extend(slug for slug in spend if slug not in content)

        urls = tuple(
            self.reconcile_url(
                slug,
                content.get(slug),
                spend.get(slug),
                exchange_rate=exchange_rate,
            )
            for slug in slugs
        )
        totals = self.compute_totals(urls)

        label = (label or "").strip() or f"Import {created_at.date().isoformat()}"
        snapshot = Snapshot(
            id=new_snapshot_id(created_at),
            label=label,
            date=snapshot_date or created_at.date(),
            period=period,
            created_at=created_at,
            exchange_rate=exchange_rate,
            urls=urls,
            totals=totals,
        )
        logger.info(
            "Reconciled snapshot id=%s date=%s urls=%d spending=%d content_slugs=%d spend_slugs=%d",
            snapshot.id,
            snapshot.date.isoformat(),
            totals.url_count,
            totals.spending_url_count,
            len(content),
            len(spend),
        )
        return snapshot


def get_reconciliation_service() -> ReconciliationService:
    return ReconciliationService()

"""
app/services/export_service.py

Flat CSV exports of reconciled data.

Three variants, each with a fixed column order:

    snapshot   every spending URL of one snapshot
    bucket     the URLs of one status bucket of one snapshot
    range      the aggregated URLs of a date-range query

Formatting rules
----------------
- currency to 2 places, ROI to 1 place, revenue per click to 4 places,
  counts as plain integers; rounding is half-up on the exact binary value
  of the float so output matches what the dashboard displays.
- slugs are written with a leading ``/``.
- campaign names are joined with ``" | "``.
- every field is double-quoted; lines are separated by ``\\n`` with no
  trailing newline.

No filtering or sorting happens here; rows are written in the order given.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from app.domain.aggregation import DateRangeURL
from app.domain.reconciliation import ReconciledURL

CAMPAIGN_SEPARATOR = " | "

SNAPSHOT_FIELDS: list[str] = [
    "Slug",
    "Status",
    "MV Revenue (USD)",
    "MV Views",
    "MV RPM",
    "GA Spend (INR)",
    "GA Spend (USD)",
    "GA Clicks",
    "GA Impressions",
    "Campaigns",
    "Profit (USD)",
    "ROI %",
    "Rev/Click",
]

BUCKET_FIELDS: list[str] = [
    "Slug",
    "Campaign",
    "MV Revenue (USD)",
    "MV Views",
    "GA Spend (INR)",
    "GA Spend (USD)",
    "GA Clicks",
    "GA Impressions",
    "Profit (USD)",
    "ROI %",
    "Rev/Click",
    "Status",
]

RANGE_FIELDS: list[str] = [
    "Slug",
    "Status",
    "Trend",
    "Campaigns",
    "Months Active",
    "MV Revenue",
    "GA Spend USD",
    "GA Spend INR",
    "Clicks",
    "Impressions",
    "Profit",
    "ROI%",
]


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Tabular data ready for CSV serialisation.

    Attributes
    ----------
    rows:   One list of already-formatted cells per output row.
    fields: Ordered column names.
    """

    rows: list[list[str]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_fixed(value: float, places: int) -> str:
    """
    Render *value* with exactly *places* decimals, rounding half away from zero.

    ``Decimal(value)`` is the exact binary expansion, so ``1.005`` renders as
    ``1.00`` just as it would in a browser. Negative zero renders as ``0``.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:.{places}f}"


def _slug(slug: str) -> str:
    return "/" + slug


def _campaigns(campaigns: Iterable[str]) -> str:
    return CAMPAIGN_SEPARATOR.join(campaigns)


def render_csv(result: ExportResult) -> str:
    """
    Serialise *result* with every field double-quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(result.fields)
    writer.writerows(result.rows)
    return buffer.getvalue().rstrip("\n")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ExportService:
    """
    Builds :class:`ExportResult` tables for the three export variants.
    """

    def snapshot_rows(self, urls: Iterable[ReconciledURL]) -> ExportResult:
        rows = [
            [
                _slug(url.slug),
                url.status,
                format_fixed(url.content.revenue, 2),
                str(url.content.views),
                format_fixed(url.content.rpm, 2),
                format_fixed(url.spend.cost_source_currency, 2),
                format_fixed(url.cost_target_currency, 2),
                str(url.spend.clicks),
                str(url.spend.impressions),
                _campaigns(url.spend.campaigns),
                format_fixed(url.profit, 2),
                format_fixed(url.roi, 1),
                format_fixed(url.revenue_per_click, 4),
            ]
            for url in urls
        ]
        return ExportResult(rows=rows, fields=list(SNAPSHOT_FIELDS))

    def bucket_rows(self, urls: Iterable[ReconciledURL]) -> ExportResult:
        rows = [
            [
                _slug(url.slug),
                _campaigns(url.spend.campaigns),
                format_fixed(url.content.revenue, 2),
                str(url.content.views),
                format_fixed(url.spend.cost_source_currency, 2),
                format_fixed(url.cost_target_currency, 2),
                str(url.spend.clicks),
                str(url.spend.impressions),
                format_fixed(url.profit, 2),
                format_fixed(url.roi, 1),
                format_fixed(url.revenue_per_click, 4),
                url.status,
            ]
            for url in urls
        ]
        return ExportResult(rows=rows, fields=list(BUCKET_FIELDS))

    def range_rows(self, urls: Iterable[DateRangeURL]) -> ExportResult:
        rows = [
            [
                _slug(url.slug),
                url.status,
                url.trend,
                _campaigns(url.campaigns),
                str(url.month_count),
                format_fixed(url.content_revenue, 2),
                format_fixed(url.spend_target_currency, 2),
                format_fixed(url.spend_source_currency, 2),
                str(url.clicks),
                str(url.impressions),
                format_fixed(url.profit, 2),
                format_fixed(url.roi, 1),
            ]
            for url in urls
        ]
        return ExportResult(rows=rows, fields=list(RANGE_FIELDS))


_export_service = ExportService()


def get_export_service() -> ExportService:
    return _export_service

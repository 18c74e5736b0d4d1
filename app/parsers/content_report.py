"""
app/parsers/content_report.py

Extractor for the content-revenue (per-page views and revenue) export.

The header is always the first line and is matched case-insensitively.
Rows without a slug are dropped.
"""

from __future__ import annotations

import logging

from app.domain.imports import ReportParseResult
from app.domain.reconciliation import ContentRow
from app.parsers.csv_text import split_line, split_lines, zip_row
from app.parsers.numeric import parse_number

logger = logging.getLogger(__name__)

CONTENT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "slug": ("slug",),
    "views": ("views", "pageviews"),
    "revenue": ("revenue",),
    "rpm": ("rpm",),
    "cpm": ("cpm",),
    "viewability": ("viewability",),
    "fill_rate": ("fillrate", "fill rate", "fill_rate"),
    "impressions_per_view": (
        "impressionsperpageview",
        "impressions per pageview",
        "impressions_per_pageview",
        "impressionsperview",
    ),
}

_NUMERIC_FIELDS: tuple[str, ...] = (
    "views",
    "revenue",
    "rpm",
    "cpm",
    "viewability",
    "fill_rate",
    "impressions_per_view",
)


def _lookup(row: dict[str, str], field_name: str) -> str:
    for alias in CONTENT_COLUMN_ALIASES[field_name]:
        value = row.get(alias)
        if value:
            return value
    return ""


def parse_content_report(text: str | None) -> ReportParseResult[ContentRow]:
    """
    Extract typed content rows from the raw CSV *text*.

    ``None`` or blank text means the report was not provided.
    """
    if text is None or not text.strip():
        return ReportParseResult(rows=(), provided=False)

    lines = split_lines(text)
    if len(lines) < 2:
        logger.debug("Content report has no data lines lines=%d", len(lines))
        return ReportParseResult(rows=(), provided=True)

    headers = [header.lower() for header in split_line(lines[0])]
    rows: list[ContentRow] = []
    warned_rows = 0

    for line in lines[1:]:
        raw = zip_row(headers, split_line(line))
        slug = _lookup(raw, "slug")
        if not slug:
            continue

        values: dict[str, float] = {}
        row_clean = True
        for field_name in _NUMERIC_FIELDS:
            value, clean = parse_number(_lookup(raw, field_name))
            values[field_name] = value
            row_clean = row_clean and clean
        if not row_clean:
            warned_rows += 1

        rows.append(
            ContentRow(
                slug=slug,
                views=int(values["views"]),
                revenue=values["revenue"],
                rpm=values["rpm"],
                cpm=values["cpm"],
                viewability=values["viewability"],
                fill_rate=values["fill_rate"],
                impressions_per_view=values["impressions_per_view"],
            )
        )

    logger.debug(
        "Content report parsed rows=%d coercion_warnings=%d",
        len(rows),
        warned_rows,
    )
    return ReportParseResult(
        rows=tuple(rows),
        provided=True,
        rows_with_coercion_warnings=warned_rows,
    )

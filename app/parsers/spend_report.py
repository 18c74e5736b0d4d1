"""
app/parsers/spend_report.py

Extractor for the ad-platform landing-page report.

The export starts with free-text title/date lines, so the header has to be
located. The title line usually contains "Landing page" on its own; the real
header is the first line carrying the landing-page, cost and clicks columns.
Only lines starting with ``https://`` are data rows, which skips the
"Total: ..." footers appended by the exporter.
"""

from __future__ import annotations

import logging

from app.domain.imports import ReportParseResult
from app.domain.reconciliation import SpendRow
from app.parsers.csv_text import split_line, split_lines, zip_row
from app.parsers.numeric import parse_number

logger = logging.getLogger(__name__)

COL_LANDING_PAGE = "Landing page"
COL_CAMPAIGN = "Campaign"
COL_CLICKS = "Clicks"
COL_IMPRESSIONS = "Impr."
COL_COST = "Cost"
COL_AVG_CPC = "Avg. CPC"
COL_CTR = "CTR"

HEADER_MARKERS: tuple[str, ...] = (COL_LANDING_PAGE, COL_COST, COL_CLICKS)
DATA_ROW_PREFIX = "https://"
_FALLBACK_MIN_FIELDS = 5


def find_header_index(lines: list[str]) -> int | None:
    """
    Return the index of the header line, or ``None`` when there is none.
    """
    for index, line in enumerate(lines):
        if all(marker in line for marker in HEADER_MARKERS):
            return index
    for index, line in enumerate(lines):
        if COL_LANDING_PAGE in line and len(line.split(",")) > _FALLBACK_MIN_FIELDS:
            return index
    return None


def parse_spend_report(text: str | None) -> ReportParseResult[SpendRow]:
    """
    Extract one typed row per campaign/landing-page line of the raw CSV *text*.

    A missing header yields zero rows rather than an error.
    """
    if text is None or not text.strip():
        return ReportParseResult(rows=(), provided=False)

    lines = split_lines(text)
    header_index = find_header_index(lines)
    if header_index is None:
        logger.debug("Spend report header not found lines=%d", len(lines))
        return ReportParseResult(rows=(), provided=True)

    headers = split_line(lines[header_index])
    rows: list[SpendRow] = []
    warned_rows = 0

    for line in lines[header_index + 1:]:
        stripped = line.strip()
        if not stripped.startswith(DATA_ROW_PREFIX):
            continue
        raw = zip_row(headers, split_line(stripped))

        clicks, clicks_ok = parse_number(raw.get(COL_CLICKS))
        impressions, impressions_ok = parse_number(raw.get(COL_IMPRESSIONS))
        cost, cost_ok = parse_number(raw.get(COL_COST))
        avg_cpc, cpc_ok = parse_number(raw.get(COL_AVG_CPC))
        ctr, ctr_ok = parse_number(raw.get(COL_CTR))
        if not all((clicks_ok, impressions_ok, cost_ok, cpc_ok, ctr_ok)):
            warned_rows += 1

        rows.append(
            SpendRow(
                landing_page=raw.get(COL_LANDING_PAGE, "").strip(),
                campaign=raw.get(COL_CAMPAIGN, "").strip(),
                clicks=int(clicks),
                impressions=int(impressions),
                cost=cost,
                avg_cpc=avg_cpc,
                ctr=ctr,
            )
        )

    logger.debug(
        "Spend report parsed header_line=%d rows=%d coercion_warnings=%d",
        header_index + 1,
        len(rows),
        warned_rows,
    )
    return ReportParseResult(
        rows=tuple(rows),
        provided=True,
        rows_with_coercion_warnings=warned_rows,
    )

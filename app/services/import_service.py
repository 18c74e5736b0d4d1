"""
app/services/import_service.py

Service layer for the two-report import workflow.

    1. decode the uploaded bytes (UTF-8, optional BOM)
    2. extract content-revenue rows and ad-spend rows
    3. reconcile them with the exchange rate currently in settings
    4. prepend the new snapshot to the store

A report that was supplied but produced zero rows is not an error: the
snapshot is still built from whatever was extracted and the mismatch is
reported back as a warning, since a wrong export format is the usual cause.
"""

from __future__ import annotations

import logging
from datetime import date

from app.domain.imports import ImportSummary, ReportParseResult
from app.parsers.content_report import parse_content_report
from app.parsers.spend_report import parse_spend_report
from app.repositories.settings_repository import SettingsRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.reconciliation_service import ReconciliationError, ReconciliationService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ReportDecodeError(ValueError):
    """
    Raised when an uploaded report is not UTF-8 text.
    """


class ImportValidationError(ValueError):
    """
    Raised when an import request cannot produce a snapshot.
    """


def decode_upload(raw: bytes | None, *, report_name: str = "report") -> str | None:
    """
    Decode uploaded bytes, dropping a UTF-8 byte-order mark. ``None`` and
    empty payloads mean "not provided".
    """
    if not raw:
        return None
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ReportDecodeError(f"{report_name} must be UTF-8 encoded.") from exc


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SnapshotImportService:
    """
    Coordinates extraction, reconciliation and storage of one import.
    """

    def __init__(
        self,
        *,
        snapshots: SnapshotRepository,
        settings: SettingsRepository,
        reconciler: ReconciliationService | None = None,
    ) -> None:
        self._snapshots = snapshots
        self._settings = settings
        self._reconciler = reconciler or ReconciliationService()

    def import_reports(
        self,
        content_text: str | None,
        spend_text: str | None,
        *,
        label: str | None = None,
        snapshot_date: date | None = None,
        period: str = "monthly",
    ) -> ImportSummary:
        """
        Build and store a snapshot from the two report texts.

        Args:
            content_text:  Content-revenue CSV text, or ``None`` if not supplied.
            spend_text:    Ad-spend CSV text, or ``None`` if not supplied.
            label:         Display label; defaults to ``"Import <date>"``.
            snapshot_date: Business date used for time bucketing; defaults to today.
            period:        Reporting period tag.

        Raises:
            ImportValidationError: neither report supplied, unknown period or
                unusable exchange rate.
        """
        content_missing = content_text is None or not content_text.strip()
        spend_missing = spend_text is None or not spend_text.strip()
        if content_missing and spend_missing:
            raise ImportValidationError("Provide at least one report to import.")

        content = parse_content_report(content_text)
        spend = parse_spend_report(spend_text)
        warnings = self._collect_warnings(content, spend)

        exchange_rate = self._settings.get_exchange_rate()
        try:
            snapshot = self._reconciler.reconcile(
                content.rows,
                spend.rows,
                exchange_rate=exchange_rate,
                label=label,
                snapshot_date=snapshot_date,
                period=period,
            )
        except ReconciliationError as exc:
            raise ImportValidationError(str(exc)) from exc

        self._snapshots.add(snapshot)
        logger.info(
            "Import complete snapshot=%s content_rows=%d spend_rows=%d rate=%s warnings=%d",
            snapshot.id,
            content.row_count,
            spend.row_count,
            exchange_rate,
            len(warnings),
        )
        return ImportSummary(snapshot=snapshot, content=content, spend=spend, warnings=warnings)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _collect_warnings(
        self,
        content: ReportParseResult,
        spend: ReportParseResult,
    ) -> list[str]:
        warnings: list[str] = []
        for name, result in (("Content report", content), ("Spend report", spend)):
            if result.format_mismatch:
                logger.warning("%s was provided but no rows were parsed", name)
                warnings.append(f"{name}: 0 rows parsed. Check the export format.")
            elif result.rows_with_coercion_warnings:
                warnings.append(
                    f"{name}: {result.rows_with_coercion_warnings} row(s) had values "
                    "that were not clean numbers and were read partially or as 0."
                )
        return warnings

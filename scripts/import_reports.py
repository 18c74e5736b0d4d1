"""
Import a content-revenue report and/or an ad-spend report from disk into
the configured snapshot store.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from pathlib import Path

from app.config import get_adprofit_settings, get_storage_settings
from app.domain.reconciliation import SnapshotPeriod
from app.repositories.settings_repository import SettingsRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.import_service import ImportValidationError, ReportDecodeError, SnapshotImportService, decode_upload
from db.repositories.blob_store import create_blob_store
from db.repositories.errors import BlobStoreError

logger = logging.getLogger(__name__)


def _read_report(path: Path | None, report_name: str) -> str | None:
    if path is None:
        return None
    return decode_upload(path.read_bytes(), report_name=report_name)


def main() -> int:
    parser = argparse.ArgumentParser(description="Reconcile ad-spend and content-revenue CSV reports into a snapshot.")
    parser.add_argument("--content", type=Path, default=None, help="Content-revenue CSV file.")
    parser.add_argument("--spend", type=Path, default=None, help="Ad-spend CSV file.")
    parser.add_argument("--label", default=None, help="Snapshot label (default: 'Import <date>').")
    parser.add_argument(
        "--date",
        dest="snapshot_date",
        type=date.fromisoformat,
        default=None,
        help="Business date of the snapshot, YYYY-MM-DD (default: today).",
    )
    parser.add_argument("--period", choices=SnapshotPeriod.ALL, default=SnapshotPeriod.MONTHLY)
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.content is None and args.spend is None:
        parser.error("provide --content, --spend or both")

    storage = get_storage_settings()
    blob_store = create_blob_store(storage.backend, blob_dir=storage.blob_dir)
    service = SnapshotImportService(
        snapshots=SnapshotRepository(blob_store, key=storage.snapshots_key),
        settings=SettingsRepository(
            blob_store,
            key=storage.settings_key,
            default_exchange_rate=get_adprofit_settings().default_exchange_rate,
        ),
    )

    try:
        summary = service.import_reports(
            _read_report(args.content, "content report"),
            _read_report(args.spend, "spend report"),
            label=args.label,
            snapshot_date=args.snapshot_date,
            period=args.period,
        )
    except (OSError, ReportDecodeError, ImportValidationError, BlobStoreError) as exc:
        logger.error("Import failed: %s", exc)
        return 1

    snapshot = summary.snapshot
    payload = {
        "snapshot_id": snapshot.id,
        "label": snapshot.label,
        "date": snapshot.date.isoformat(),
        "period": snapshot.period,
        "exchange_rate": snapshot.exchange_rate,
        "content_rows": summary.content.row_count,
        "spend_rows": summary.spend.row_count,
        "url_count": snapshot.totals.url_count,
        "spending_url_count": snapshot.totals.spending_url_count,
        "total_profit": round(snapshot.totals.total_profit, 2),
        "warnings": summary.warnings,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

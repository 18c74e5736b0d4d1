"""
tests/conftest.py

Shared fixtures: fresh services, an in-memory blob store and a builder for
hand-made snapshots with known per-URL figures.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timezone
from typing import Any

import pytest

from app.domain.reconciliation import AdRow, ContentRow, Snapshot, SnapshotPeriod
from app.repositories.settings_repository import SettingsRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.aggregation_service import AggregationService
from app.services.reconciliation_service import ReconciliationService
from db.repositories.blob_store import InMemoryBlobStore


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def snapshot_repository(blob_store: InMemoryBlobStore) -> SnapshotRepository:
    return SnapshotRepository(blob_store)


@pytest.fixture()
def settings_repository(blob_store: InMemoryBlobStore) -> SettingsRepository:
    return SettingsRepository(blob_store)


@pytest.fixture()
def reconciler() -> ReconciliationService:
    return ReconciliationService()


@pytest.fixture()
def aggregation() -> AggregationService:
    return AggregationService()


@pytest.fixture()
def make_snapshot(reconciler: ReconciliationService) -> Callable[..., Snapshot]:
    """
    Build a Snapshot from ``{"slug", "revenue", "cost", "clicks", "campaigns"}``
    mappings. ``cost`` is in the source currency; the default rate is 1 so
    source and target figures match.
    """

    counter = itertools.count(1)

    def _make(
        snapshot_date: str,
        rows: Iterable[Mapping[str, Any]],
        *,
        exchange_rate: float = 1.0,
        label: str | None = None,
    ) -> Snapshot:
        urls = []
        for row in rows:
            slug = row["slug"]
            cost = float(row.get("cost", 0.0))
            clicks = int(row.get("clicks", 0))
            spend = AdRow(
                slug=slug,
                campaigns=tuple(row.get("campaigns", ())),
                clicks=clicks,
                impressions=clicks * 10,
                cost_source_currency=cost,
            )
            content = ContentRow(slug=slug, views=clicks * 2, revenue=float(row.get("revenue", 0.0)))
            urls.append(reconciler.reconcile_url(slug, content, spend, exchange_rate=exchange_rate))

        index = next(counter)
        return Snapshot(
            id=f"snap-{index}",
            label=label or f"Snapshot {index}",
            date=date.fromisoformat(snapshot_date),
            period=SnapshotPeriod.MONTHLY,
            created_at=datetime(2026, 10, 1, 12, index, tzinfo=timezone.utc),
            exchange_rate=exchange_rate,
            urls=tuple(urls),
            totals=reconciler.compute_totals(urls),
        )

    return _make

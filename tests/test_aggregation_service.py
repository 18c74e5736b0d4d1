"""
tests/test_aggregation_service.py

Pytest unit tests for AggregationService.

Fixture data (exchange rate 1, so spend figures are identical in both
currencies):

    S1  2026-01-10   a  rev 100 cost  50 clicks 10  [C1]
                     b  rev  20 cost  40 clicks  4  [C2]
                     c  rev  30 (no spend)
    S2  2026-01-25   a  rev  60 cost  40 clicks  6  [C3]
                     b  rev  10 cost  30 clicks  2
    S3  2026-02-05   a  rev  50 cost 100 clicks  5  [C1]
                     d  rev   0 cost  20 clicks  1  [C4]

The store lists them newest-first: S3, S2, S1.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

import pytest

from app.domain.reconciliation import Snapshot
from app.services.aggregation_service import AggregationService
from profitability.classifier import TrendDirection, URLStatus


@pytest.fixture()
def snapshots(make_snapshot: Callable[..., Snapshot]) -> list[Snapshot]:
    s1 = make_snapshot(
        "2026-01-10",
        [
            {"slug": "a", "revenue": 100, "cost": 50, "clicks": 10, "campaigns": ["C1"]},
            {"slug": "b", "revenue": 20, "cost": 40, "clicks": 4, "campaigns": ["C2"]},
            {"slug": "c", "revenue": 30},
        ],
    )
    s2 = make_snapshot(
        "2026-01-25",
        [
            {"slug": "a", "revenue": 60, "cost": 40, "clicks": 6, "campaigns": ["C3"]},
            {"slug": "b", "revenue": 10, "cost": 30, "clicks": 2},
        ],
    )
    s3 = make_snapshot(
        "2026-02-05",
        [
            {"slug": "a", "revenue": 50, "cost": 100, "clicks": 5, "campaigns": ["C1"]},
            {"slug": "d", "revenue": 0, "cost": 20, "clicks": 1, "campaigns": ["C4"]},
        ],
    )
    return [s3, s2, s1]


def _full_range(aggregation: AggregationService, snapshots: list[Snapshot], **kwargs):
    return aggregation.date_range(
        snapshots,
        date_from=date(2026, 1, 1),
        date_to=date(2026, 2, 28),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Monthly trend
# ---------------------------------------------------------------------------


class TestMonthlyTrend:
    def test_snapshots_in_one_month_are_summed(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        january, february = aggregation.monthly_trend(snapshots)

        assert january.month == "2026-01"
        assert january.snapshot_count == 2
        assert january.content_revenue == pytest.approx(220.0)
        assert january.spend_target_currency == pytest.approx(160.0)
        assert january.spend_source_currency == pytest.approx(160.0)
        assert january.profit == pytest.approx(60.0)
        assert january.clicks == 22
        assert january.spending_url_count == 4
        assert january.roi == pytest.approx(37.5)

        assert february.month == "2026-02"
        assert february.profit == pytest.approx(-70.0)

    def test_status_counts_only_spending_urls(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        january, february = aggregation.monthly_trend(snapshots)

        assert (january.profitable, january.losing, january.turnoff) == (2, 0, 2)
        assert (february.profitable, february.losing, february.turnoff) == (0, 0, 2)

    def test_sorted_chronologically_regardless_of_store_order(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        months = [bucket.month for bucket in aggregation.monthly_trend(list(reversed(snapshots)))]
        assert months == ["2026-01", "2026-02"]

    def test_keeps_only_the_last_n_months(self, snapshots: list[Snapshot]) -> None:
        buckets = AggregationService(trend_months=1).monthly_trend(snapshots)
        assert [bucket.month for bucket in buckets] == ["2026-02"]

    def test_empty_store(self, aggregation: AggregationService) -> None:
        assert aggregation.monthly_trend([]) == []


# ---------------------------------------------------------------------------
# Date range
# ---------------------------------------------------------------------------


class TestDateRange:
    def test_per_slug_values_are_sums(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        result = _full_range(aggregation, snapshots)
        a = next(url for url in result.urls if url.slug == "a")

        assert a.content_revenue == pytest.approx(210.0)
        assert a.spend_target_currency == pytest.approx(190.0)
        assert a.spend_source_currency == pytest.approx(190.0)
        assert a.clicks == 21
        assert a.impressions == 210
        assert a.appearances == 3
        assert a.campaigns == ("C1", "C3")
        assert a.months_active == ("2026-01", "2026-02")
        assert a.month_count == 2
        assert a.per_month_profit == pytest.approx({"2026-01": 70.0, "2026-02": -50.0})

    def test_ratios_come_from_sums(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        a = next(url for url in _full_range(aggregation, snapshots).urls if url.slug == "a")

        assert a.profit == pytest.approx(20.0)
        assert a.roi == pytest.approx(20.0 / 190.0 * 100)
        assert a.revenue_per_click == pytest.approx(10.0)
        assert a.cost_per_click == pytest.approx(190.0 / 21)
        assert a.status == URLStatus.IMPROVING
        assert a.trend == TrendDirection.DECLINING

    def test_single_month_slug_is_stable(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        b = next(url for url in _full_range(aggregation, snapshots).urls if url.slug == "b")
        assert b.trend == TrendDirection.STABLE
        assert b.status == URLStatus.TURNOFF
        assert b.campaigns == ("C2",)

    def test_non_spending_urls_are_excluded(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        slugs = {url.slug for url in _full_range(aggregation, snapshots).urls}
        assert slugs == {"a", "b", "d"}

    def test_totals(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        result = _full_range(aggregation, snapshots)
        totals = result.totals

        assert result.snapshots_used == 3
        assert totals is not None
        assert totals.url_count == 3
        assert totals.content_revenue == pytest.approx(240.0)
        assert totals.spend_target_currency == pytest.approx(280.0)
        assert totals.profit == pytest.approx(-40.0)
        assert totals.clicks == 28
        assert (totals.profitable, totals.improving, totals.losing, totals.turnoff) == (0, 1, 0, 2)
        assert totals.roi == pytest.approx(-40.0 / 280.0 * 100)

    def test_filters_do_not_change_totals(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        unfiltered = _full_range(aggregation, snapshots)
        filtered = _full_range(aggregation, snapshots, status=URLStatus.TURNOFF)

        assert [url.slug for url in filtered.urls] == ["d", "b"]
        assert filtered.totals == unfiltered.totals

    def test_search_matches_slug_and_campaign(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        assert [u.slug for u in _full_range(aggregation, snapshots, search="c3").urls] == ["a"]
        assert [u.slug for u in _full_range(aggregation, snapshots, search="B").urls] == ["b"]

    def test_sorting(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        by_profit = _full_range(aggregation, snapshots)
        by_slug = _full_range(aggregation, snapshots, sort_by="slug", sort_dir="asc")
        by_appearances = _full_range(aggregation, snapshots, sort_by="appearances")

        assert [u.slug for u in by_profit.urls] == ["a", "d", "b"]
        assert [u.slug for u in by_slug.urls] == ["a", "b", "d"]
        assert [u.slug for u in by_appearances.urls] == ["a", "b", "d"]

    def test_monthly_breakdown(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        january, february = _full_range(aggregation, snapshots).monthly_breakdown

        assert january.month == "2026-01"
        assert january.content_revenue == pytest.approx(190.0)
        assert january.spend_target_currency == pytest.approx(160.0)
        assert january.profit == pytest.approx(30.0)
        assert january.clicks == 22
        assert january.roi == pytest.approx(18.75)
        assert february.month == "2026-02"
        assert february.profit == pytest.approx(-70.0)

    def test_partial_range(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        result = aggregation.date_range(
            snapshots, date_from=date(2026, 1, 1), date_to=date(2026, 1, 31)
        )
        a = next(url for url in result.urls if url.slug == "a")

        assert result.snapshots_used == 2
        assert a.profit == pytest.approx(70.0)
        assert a.months_active == ("2026-01",)

    def test_bounds_are_inclusive(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        result = aggregation.date_range(
            snapshots, date_from=date(2026, 1, 25), date_to=date(2026, 1, 25)
        )
        assert result.snapshots_used == 1

    def test_no_matching_snapshots_is_explicitly_empty(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        result = aggregation.date_range(
            snapshots, date_from=date(2025, 1, 1), date_to=date(2025, 12, 31)
        )

        assert result.is_empty
        assert result.urls == []
        assert result.totals is None
        assert result.snapshots_used == 0
        assert result.monthly_breakdown == []

    def test_matched_but_no_spending_urls_has_zero_totals(
        self, aggregation: AggregationService, make_snapshot: Callable[..., Snapshot]
    ) -> None:
        content_only = make_snapshot("2026-03-01", [{"slug": "x", "revenue": 5}])
        result = aggregation.date_range(
            [content_only], date_from=date(2026, 3, 1), date_to=date(2026, 3, 31)
        )

        assert not result.is_empty
        assert result.urls == []
        assert result.totals is not None
        assert result.totals.url_count == 0
        assert [m.month for m in result.monthly_breakdown] == ["2026-03"]

    def test_rejects_unknown_status(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        with pytest.raises(ValueError):
            _full_range(aggregation, snapshots, status="great")

    def test_rejects_unknown_sort_direction(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        with pytest.raises(ValueError):
            _full_range(aggregation, snapshots, sort_dir="sideways")


# ---------------------------------------------------------------------------
# URL history
# ---------------------------------------------------------------------------


class TestURLHistory:
    def test_follows_store_order(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        history = aggregation.url_history(snapshots, "a")

        assert [entry.snapshot_id for entry in history] == [s.id for s in snapshots]
        assert [entry.date for entry in history] == [date(2026, 2, 5), date(2026, 1, 25), date(2026, 1, 10)]
        assert history[0].url.profit == pytest.approx(-50.0)
        assert history[0].label == snapshots[0].label
        assert history[0].period == "monthly"

    def test_absent_snapshots_are_omitted(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        history = aggregation.url_history(snapshots, "c")
        assert len(history) == 1
        assert history[0].url.has_spend is False

    def test_unknown_slug(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        assert aggregation.url_history(snapshots, "zzz") == []


# ---------------------------------------------------------------------------
# Single-snapshot views
# ---------------------------------------------------------------------------


class TestSnapshotViews:
    def test_spending_urls(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        s1 = snapshots[-1]

        assert [u.slug for u in aggregation.spending_urls(s1)] == ["a", "b"]
        assert [u.slug for u in aggregation.spending_urls(s1, sort_by="roi", sort_dir="asc")] == ["b", "a"]
        assert [u.slug for u in aggregation.spending_urls(s1, status=URLStatus.PROFITABLE)] == ["a"]
        assert [u.slug for u in aggregation.spending_urls(s1, search="c2")] == ["b"]

    def test_summary(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        s1 = snapshots[-1]
        summary = aggregation.snapshot_summary(s1)

        assert summary.snapshot_id == s1.id
        assert summary.totals == s1.totals
        assert (summary.profitable, summary.improving, summary.losing, summary.turnoff) == (1, 0, 0, 1)
        assert summary.average_roi == pytest.approx(60.0 / 90.0 * 100)
        assert summary.wasted_spend == pytest.approx(40.0)

    def test_summary_without_spend(
        self, aggregation: AggregationService, make_snapshot: Callable[..., Snapshot]
    ) -> None:
        summary = aggregation.snapshot_summary(make_snapshot("2026-01-01", [{"slug": "x", "revenue": 5}]))
        assert summary.average_roi == 0.0
        assert summary.profitable == 0

    def test_buckets_sort_losers_first(self, aggregation: AggregationService, snapshots: list[Snapshot]) -> None:
        buckets = aggregation.status_buckets(snapshots[0])
        turnoff = buckets[URLStatus.TURNOFF]

        assert list(buckets) == [URLStatus.TURNOFF, URLStatus.LOSING, URLStatus.IMPROVING, URLStatus.PROFITABLE]
        assert [u.slug for u in turnoff.urls] == ["a", "d"]
        assert turnoff.total_spend == pytest.approx(120.0)
        assert turnoff.total_profit == pytest.approx(-70.0)
        assert buckets[URLStatus.PROFITABLE].urls == []
        assert buckets[URLStatus.PROFITABLE].total_spend == 0

    def test_bucket_search_narrows_urls_and_totals(
        self, aggregation: AggregationService, snapshots: list[Snapshot]
    ) -> None:
        turnoff = aggregation.status_buckets(snapshots[0], search="c4")[URLStatus.TURNOFF]

        assert [u.slug for u in turnoff.urls] == ["d"]
        assert turnoff.total_spend == pytest.approx(20.0)
        assert turnoff.total_profit == pytest.approx(-20.0)
        by_slug = aggregation.status_buckets(snapshots[0], search="A")[URLStatus.TURNOFF]
        assert [u.slug for u in by_slug.urls] == ["a"]

    def test_profitable_bucket_lists_biggest_earners_first(
        self, aggregation: AggregationService, make_snapshot: Callable[..., Snapshot]
    ) -> None:
        snapshot = make_snapshot(
            "2026-01-01",
            [
                {"slug": "x", "revenue": 20, "cost": 10, "clicks": 1},
                {"slug": "y", "revenue": 50, "cost": 20, "clicks": 1},
            ],
        )
        bucket = aggregation.status_buckets(snapshot)[URLStatus.PROFITABLE]
        assert [u.slug for u in bucket.urls] == ["y", "x"]

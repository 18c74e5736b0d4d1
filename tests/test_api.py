"""
tests/test_api.py

HTTP surface exercised through the FastAPI test client. The blob store
dependency is overridden with an in-memory store per test.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_blob_store
from app.main import create_app
from app.services.export_service import BUCKET_FIELDS, SNAPSHOT_FIELDS
from db.repositories.blob_store import InMemoryBlobStore
from db.repositories.errors import BlobStoreError

CONTENT_CSV = "slug,views,revenue,rpm\nhello,10,100,10\nworld,4,8,2\n"

SPEND_CSV = (
    "Landing page report\n"
    "Landing page,Campaign,Clicks,Impr.,Cost,Avg. CPC,CTR\n"
    "https://site.com/hello,Brand,5,50,4350,870,10%\n"
)


class FailingBlobStore:
    def get(self, key: str) -> str | None:
        raise BlobStoreError(f"cannot read {key}")

    def set(self, key: str, value: str) -> None:
        raise BlobStoreError(f"cannot write {key}")


def _client_for(store: object) -> Iterator[TestClient]:
    application = create_app()
    application.dependency_overrides[get_blob_store] = lambda: store
    with TestClient(application) as test_client:
        yield test_client
    application.dependency_overrides.clear()


@pytest.fixture()
def client() -> Iterator[TestClient]:
    yield from _client_for(InMemoryBlobStore())


@pytest.fixture()
def failing_client() -> Iterator[TestClient]:
    yield from _client_for(FailingBlobStore())


def _import(client: TestClient, **form: str):
    return client.post(
        "/imports",
        files={
            "content_file": ("content.csv", CONTENT_CSV, "text/csv"),
            "spend_file": ("spend.csv", SPEND_CSV, "text/csv"),
        },
        data={"label": "January", "snapshot_date": "2026-01-31", **form},
    )


@pytest.fixture()
def imported(client: TestClient) -> dict:
    response = _import(client)
    assert response.status_code == 201
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestImports:
    def test_import_creates_snapshot(self, imported: dict) -> None:
        snapshot = imported["snapshot"]

        assert snapshot["label"] == "January"
        assert snapshot["date"] == "2026-01-31"
        assert snapshot["exchange_rate"] == 87.0
        assert snapshot["totals"]["url_count"] == 2
        assert snapshot["totals"]["spending_url_count"] == 1
        assert imported["content"]["row_count"] == 2
        assert imported["spend"]["row_count"] == 1
        assert imported["warnings"] == []

    def test_no_files_is_rejected(self, client: TestClient) -> None:
        response = client.post("/imports", data={"label": "empty"})
        assert response.status_code == 400

    def test_non_csv_upload_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/imports",
            files={"content_file": ("notes.txt", "hello", "text/plain")},
        )
        assert response.status_code == 400

    def test_unknown_period_is_rejected(self, client: TestClient) -> None:
        assert _import(client, period="hourly").status_code == 400

    def test_wrong_spend_format_still_imports(self, client: TestClient) -> None:
        response = client.post(
            "/imports",
            files={
                "content_file": ("content.csv", CONTENT_CSV, "text/csv"),
                "spend_file": ("spend.csv", "foo,bar\n1,2\n", "text/csv"),
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["spend"]["format_mismatch"] is True
        assert len(body["warnings"]) == 1


class TestSnapshots:
    def test_list_and_get_latest(self, client: TestClient, imported: dict) -> None:
        listing = client.get("/snapshots").json()
        assert listing["count"] == 1
        assert "urls" not in listing["snapshots"][0]

        latest = client.get("/snapshots/latest")
        assert latest.status_code == 200
        assert latest.json()["id"] == imported["snapshot"]["id"]
        assert len(latest.json()["urls"]) == 2

    def test_unknown_snapshot(self, client: TestClient) -> None:
        assert client.get("/snapshots/nope").status_code == 404
        assert client.get("/snapshots/latest").status_code == 404

    def test_spending_urls(self, client: TestClient, imported: dict) -> None:
        urls = client.get("/snapshots/latest/urls").json()

        assert [url["slug"] for url in urls] == ["hello"]
        assert urls[0]["status"] == "profitable"
        assert urls[0]["cost_target_currency"] == pytest.approx(50.0)
        assert urls[0]["roi"] == pytest.approx(100.0)

    def test_spending_urls_filters(self, client: TestClient, imported: dict) -> None:
        assert client.get("/snapshots/latest/urls", params={"status": "turnoff"}).json() == []
        assert client.get("/snapshots/latest/urls", params={"search": "BRAND"}).json()[0]["slug"] == "hello"
        assert client.get("/snapshots/latest/urls", params={"status": "great"}).status_code == 400
        assert client.get("/snapshots/latest/urls", params={"sort_dir": "sideways"}).status_code == 400

    def test_summary(self, client: TestClient, imported: dict) -> None:
        summary = client.get("/snapshots/latest/summary").json()

        assert summary["profitable"] == 1
        assert summary["turnoff"] == 0
        assert summary["wasted_spend"] == 0.0
        assert summary["totals"]["total_profit"] == pytest.approx(58.0)

    def test_buckets(self, client: TestClient, imported: dict) -> None:
        buckets = client.get("/snapshots/latest/buckets").json()

        assert list(buckets) == ["turnoff", "losing", "improving", "profitable"]
        assert [url["slug"] for url in buckets["profitable"]["urls"]] == ["hello"]
        assert buckets["profitable"]["total_spend"] == pytest.approx(50.0)

    def test_buckets_search(self, client: TestClient, imported: dict) -> None:
        matching = client.get("/snapshots/latest/buckets", params={"search": "brand"}).json()
        missing = client.get("/snapshots/latest/buckets", params={"search": "nomatch"}).json()

        assert [url["slug"] for url in matching["profitable"]["urls"]] == ["hello"]
        assert missing["profitable"]["urls"] == []
        assert missing["profitable"]["total_spend"] == 0.0

    def test_delete_one(self, client: TestClient, imported: dict) -> None:
        response = client.delete(f"/snapshots/{imported['snapshot']['id']}")

        assert response.json() == {"deleted": 1}
        assert client.get("/snapshots").json()["count"] == 0
        assert client.delete("/snapshots/latest").status_code == 404

    def test_clear_all(self, client: TestClient) -> None:
        _import(client)
        _import(client)

        assert client.delete("/snapshots").json() == {"deleted": 2}
        assert client.get("/snapshots").json()["count"] == 0


class TestAnalytics:
    def test_monthly_trend(self, client: TestClient, imported: dict) -> None:
        months = client.get("/analytics/monthly-trend").json()["months"]

        assert [month["month"] for month in months] == ["2026-01"]
        assert months[0]["snapshot_count"] == 1
        assert months[0]["profitable"] == 1

    def test_range(self, client: TestClient, imported: dict) -> None:
        body = client.get(
            "/analytics/range",
            params={"date_from": "2026-01-01", "date_to": "2026-01-31"},
        ).json()

        assert body["snapshots_used"] == 1
        assert body["totals"]["url_count"] == 1
        assert body["urls"][0]["slug"] == "hello"
        assert body["urls"][0]["month_count"] == 1
        assert body["urls"][0]["trend"] == "stable"

    def test_empty_range(self, client: TestClient, imported: dict) -> None:
        body = client.get(
            "/analytics/range",
            params={"date_from": "2025-01-01", "date_to": "2025-12-31"},
        ).json()

        assert body["totals"] is None
        assert body["urls"] == []

    def test_inverted_range(self, client: TestClient) -> None:
        response = client.get(
            "/analytics/range",
            params={"date_from": "2026-02-01", "date_to": "2026-01-01"},
        )
        assert response.status_code == 400

    def test_url_history(self, client: TestClient, imported: dict) -> None:
        body = client.get("/analytics/urls/hello/history").json()

        assert body["slug"] == "hello"
        assert [entry["snapshot_id"] for entry in body["entries"]] == [imported["snapshot"]["id"]]
        assert client.get("/analytics/urls/missing/history").json()["entries"] == []


class TestExport:
    def test_snapshot_csv(self, client: TestClient, imported: dict) -> None:
        response = client.get("/export/snapshots/latest")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["x-row-count"] == "1"
        assert "adprofit-2026-01-31.csv" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0] == ",".join(f'"{field}"' for field in SNAPSHOT_FIELDS)
        assert lines[1].startswith('"/hello","profitable","100.00","10","10.00","4350.00","50.00"')

    def test_bucket_csv(self, client: TestClient, imported: dict) -> None:
        response = client.get("/export/snapshots/latest/status/profitable")

        assert response.status_code == 200
        assert response.text.split("\n")[0] == ",".join(f'"{field}"' for field in BUCKET_FIELDS)

    def test_bucket_csv_search(self, client: TestClient, imported: dict) -> None:
        matching = client.get("/export/snapshots/latest/status/profitable", params={"search": "HELLO"})
        missing = client.get("/export/snapshots/latest/status/profitable", params={"search": "nomatch"})

        assert matching.headers["x-row-count"] == "1"
        assert missing.headers["x-row-count"] == "0"

    def test_empty_bucket_is_header_only(self, client: TestClient, imported: dict) -> None:
        response = client.get("/export/snapshots/latest/status/turnoff")

        assert response.headers["x-row-count"] == "0"
        assert "\n" not in response.text

    def test_invalid_bucket(self, client: TestClient, imported: dict) -> None:
        assert client.get("/export/snapshots/latest/status/great").status_code == 400

    def test_range_csv(self, client: TestClient, imported: dict) -> None:
        response = client.get(
            "/export/range",
            params={"date_from": "2026-01-01", "date_to": "2026-12-31"},
        )

        assert response.status_code == 200
        assert response.headers["x-row-count"] == "1"
        assert response.text.split("\n")[1].startswith('"/hello","profitable","stable","Brand","1"')


class TestSettings:
    def test_default_rate(self, client: TestClient) -> None:
        assert client.get("/settings").json() == {"exchange_rate": 87.0}

    def test_update_rate_affects_only_new_imports(self, client: TestClient, imported: dict) -> None:
        assert client.put("/settings", json={"exchange_rate": 100.0}).json() == {"exchange_rate": 100.0}

        second = _import(client).json()["snapshot"]
        first = client.get(f"/snapshots/{imported['snapshot']['id']}").json()

        assert first["exchange_rate"] == 87.0
        assert second["exchange_rate"] == 100.0

    @pytest.mark.parametrize("rate", [0, -1])
    def test_rejects_non_positive_rate(self, client: TestClient, rate: float) -> None:
        assert client.put("/settings", json={"exchange_rate": rate}).status_code == 422
        assert client.get("/settings").json() == {"exchange_rate": 87.0}


class TestStorageFailures:
    def test_list_snapshots(self, failing_client: TestClient) -> None:
        assert failing_client.get("/snapshots").status_code == 503

    def test_import(self, failing_client: TestClient) -> None:
        response = failing_client.post(
            "/imports",
            files={"content_file": ("content.csv", CONTENT_CSV, "text/csv")},
        )
        assert response.status_code == 503

    def test_settings(self, failing_client: TestClient) -> None:
        assert failing_client.get("/settings").status_code == 503

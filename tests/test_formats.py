import tempfile
from datetime import datetime, timedelta, UTC

import duckdb
import pytest
from fastapi.testclient import TestClient

from api.main import app
from pipelines.model import DataSource, HousingRecord
from storage.db import bulk_upsert, connect

PRICES = [400.0, 402.0, None, 406.0, 408.0, 410.0, 412.0, 414.0, 416.0, 418.0]


@pytest.fixture()
def populated_db(isolated_db):
    today = datetime.now(UTC).date()
    conn = connect()
    try:
        records = [
            HousingRecord(
                date=today - timedelta(days=len(PRICES) - 1 - i),
                active_listings=40 + i,
                price_per_sqft=price,
                source=DataSource.HISTORICAL,
            )
            for i, price in enumerate(PRICES)
        ]
        # Outside the default lookback window.
        records.append(
            HousingRecord(
                date=today - timedelta(days=400),
                active_listings=1,
                price_per_sqft=100.0,
                source=DataSource.PEER,
            )
        )
        bulk_upsert(conn, records)
    finally:
        conn.close()

    yield

    if isolated_db.exists():
        isolated_db.unlink()


@pytest.fixture()
def client(populated_db):
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_data_json(client):
    response = client.get("/api/data", params={"format": "json"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["count"] == len(PRICES)
    dates = [item["date"] for item in payload["items"]]
    assert dates == sorted(dates)
    assert payload["items"][2]["price_per_sqft"] is None
    assert payload["items"][0]["source"] == "historical"


def test_data_days_window(client):
    payload = client.get("/api/data", params={"days": 500}).json()

    assert payload["count"] == len(PRICES) + 1


def test_data_csv(client):
    response = client.get("/api/data", params={"format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.content.decode().strip().splitlines()
    assert lines[0].startswith("date,active_listings,price_per_sqft")
    assert len(lines) == len(PRICES) + 1


def test_data_parquet(client):
    response = client.get("/api/data", params={"format": "parquet"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/vnd.apache.parquet")

    with tempfile.NamedTemporaryFile(suffix=".parquet") as tmp:
        tmp.write(response.content)
        tmp.flush()
        con = duckdb.connect()
        try:
            count = con.execute("SELECT COUNT(*) FROM read_parquet(?)", [tmp.name]).fetchone()[0]
        finally:
            con.close()
    assert count == len(PRICES)


def test_unsupported_format(client):
    assert client.get("/api/data", params={"format": "xml"}).status_code == 400


def test_analysis(client):
    response = client.get("/api/analysis", params={"periods": "3,30"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["gaps_filled"] == 1
    assert payload["outliers_removed"] == 0
    summary = payload["summary"]
    assert summary["data_points"] == len(PRICES)
    assert summary["min_price_per_sqft"] == 400.0
    assert summary["price_change_percent"] == pytest.approx(4.5)
    assert len(payload["price_sma"]["3"]) == len(PRICES) - 2
    assert payload["price_sma"]["30"] == []
    first = payload["price_sma"]["3"][0]
    assert first["date"] == payload["listings_sma"]["3"][0]["date"]
    # 402 + 404 (interpolated) + 400 over the first window
    assert first["value"] == pytest.approx(402.0)


def test_analysis_rejects_bad_periods(client):
    assert client.get("/api/analysis", params={"periods": "0"}).status_code == 400
    assert client.get("/api/analysis", params={"periods": "x"}).status_code == 400


def test_analysis_without_data(isolated_db):
    with TestClient(app) as test_client:
        response = test_client.get("/api/analysis")

    assert response.status_code == 404


def test_analysis_without_prices(isolated_db):
    conn = connect()
    try:
        bulk_upsert(
            conn,
            [
                HousingRecord(
                    date=datetime.now(UTC).date(),
                    active_listings=10,
                    source=DataSource.SCRAPED,
                )
            ],
        )
    finally:
        conn.close()

    with TestClient(app) as test_client:
        response = test_client.get("/api/analysis")

    assert response.status_code == 422

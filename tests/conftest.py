from datetime import date, timedelta

import pytest

from pipelines.model import DataSource, HousingRecord


def build_records(prices, *, listings=None, start=date(2025, 1, 1)):
    listings = listings if listings is not None else [40 + i for i in range(len(prices))]
    return [
        HousingRecord(
            date=start + timedelta(days=i),
            active_listings=count,
            price_per_sqft=price,
            source=DataSource.HISTORICAL,
        )
        for i, (price, count) in enumerate(zip(prices, listings, strict=True))
    ]


@pytest.fixture()
def make_records():
    return build_records


@pytest.fixture()
def isolated_db(monkeypatch, tmp_path):
    db_path = tmp_path / "housing.duckdb"
    monkeypatch.setenv("RE_TRACKER_DB_PATH", str(db_path))
    return db_path

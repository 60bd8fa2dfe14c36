from datetime import date, datetime, timedelta, timezone, UTC

import pytest
from pydantic import ValidationError

from pipelines.model import DataSource, HousingRecord, MarketSummary


def test_housing_record_serialization_roundtrip():
    payload = {
        "date": "2025-01-01",
        "active_listings": 42,
        "price_per_sqft": 455,
        "source": "scraped",
        "last_updated": datetime(2025, 1, 1, 12, tzinfo=UTC),
    }

    record = HousingRecord(**payload)

    assert record.price_per_sqft == pytest.approx(455.0)
    assert record.source is DataSource.SCRAPED

    serialized = record.model_dump(mode="json")
    assert serialized["date"] == "2025-01-01"
    assert serialized["source"] == "scraped"
    assert HousingRecord.model_validate(serialized) == record


def test_aware_datetime_is_normalized_to_utc_day():
    pacific = timezone(timedelta(hours=-8))
    record = HousingRecord(
        date=datetime(2025, 3, 1, 20, 0, tzinfo=pacific),
        active_listings=10,
        source=DataSource.HISTORICAL,
    )

    assert record.date == date(2025, 3, 2)


def test_missing_price_is_distinct_from_zero():
    record = HousingRecord(date=date(2025, 1, 1), active_listings=0, source="peer")

    assert record.price_per_sqft is None
    with pytest.raises(ValidationError):
        HousingRecord(date=date(2025, 1, 1), active_listings=0, price_per_sqft=0, source="peer")


def test_negative_listings_rejected():
    with pytest.raises(ValidationError):
        HousingRecord(date=date(2025, 1, 1), active_listings=-1, source="historical")


def test_assignment_is_validated():
    record = HousingRecord(date=date(2025, 1, 1), active_listings=1, source="historical")

    record.price_per_sqft = 300.0
    assert record.price_per_sqft == 300.0
    with pytest.raises(ValidationError):
        record.price_per_sqft = -5.0


def test_naive_last_updated_is_treated_as_utc():
    record = HousingRecord(
        date=date(2025, 1, 1),
        active_listings=1,
        source="historical",
        last_updated=datetime(2025, 1, 1, 8, 30),
    )

    assert record.last_updated.tzinfo is not None
    assert record.last_updated.utcoffset() == timedelta(0)


def test_market_summary_is_immutable():
    summary = MarketSummary(
        avg_listings=1.0,
        avg_price_per_sqft=2.0,
        min_price_per_sqft=1.0,
        max_price_per_sqft=3.0,
        price_change_percent=0.0,
        data_points=1,
    )

    with pytest.raises(ValidationError):
        summary.data_points = 5


@pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_price_rejected(price):
    with pytest.raises(ValidationError):
        HousingRecord(
            date=date(2025, 1, 1), active_listings=1, price_per_sqft=price, source="peer"
        )

    record = HousingRecord(date=date(2025, 1, 1), active_listings=1, source="peer")
    with pytest.raises(ValidationError):
        record.price_per_sqft = price

"""Historical backfill for the tracked ZIP code.

The Zillow Research CSVs are not parsed; this source produces a synthetic
monthly history with a gentle downward price and inventory trend so the rest
of the system has something realistic to chew on.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, UTC

from jobs.config import AppConfig
from pipelines.model import DataSource, HousingRecord

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
BASE_PRICE_PER_SQFT = 420.0
BASE_LISTINGS = 40


def generate_historical_records(
    config: AppConfig,
    *,
    months: int = 6,
    now: datetime | None = None,
) -> list[HousingRecord]:
    """Return ``months`` synthetic monthly records ending today, oldest first."""

    if months < 1:
        raise ValueError("months must be at least 1.")

    now = now or datetime.now(UTC)
    logger.warning(
        "Using synthetic historical data for ZIP %s; Zillow CSV parsing is not implemented.",
        config.zip_code,
    )

    records = [
        HousingRecord(
            date=now - timedelta(days=months_ago * DAYS_PER_MONTH),
            active_listings=BASE_LISTINGS + months_ago * 2,
            price_per_sqft=BASE_PRICE_PER_SQFT + months_ago * 5.0,
            source=DataSource.HISTORICAL,
            last_updated=now,
        )
        for months_ago in range(months - 1, -1, -1)
    ]
    logger.info("Generated %s historical data points", len(records))
    return records


__all__ = ["generate_historical_records"]

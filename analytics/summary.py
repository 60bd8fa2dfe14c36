"""Aggregate statistics over a window of housing records."""

from __future__ import annotations

import logging
from typing import Sequence

from analytics.errors import EmptyDatasetError, NoValidPriceDataError
from pipelines.model import HousingRecord, MarketSummary

logger = logging.getLogger(__name__)


def _percent_change(first: float | None, last: float | None) -> float:
    if first is None or last is None or first <= 0:
        return 0.0
    return (last - first) / first * 100.0


def generate_market_summary(records: Sequence[HousingRecord]) -> MarketSummary:
    """Summarize listings and prices for a date-ordered sequence of records.

    Raises
    ------
    EmptyDatasetError
        When ``records`` is empty.
    NoValidPriceDataError
        When no record carries a price.
    """

    if not records:
        raise EmptyDatasetError("Cannot generate summary from empty dataset")

    avg_listings = sum(r.active_listings for r in records) / len(records)

    prices = [r.price_per_sqft for r in records if r.price_per_sqft is not None]
    if not prices:
        raise NoValidPriceDataError("No valid price data available for summary")

    summary = MarketSummary(
        avg_listings=avg_listings,
        avg_price_per_sqft=sum(prices) / len(prices),
        min_price_per_sqft=min(prices),
        max_price_per_sqft=max(prices),
        # ``prices`` keeps sequence order, so its ends are the first/last known values.
        price_change_percent=_percent_change(prices[0], prices[-1]),
        data_points=len(records),
    )

    logger.info(
        "Generated market summary: avg_listings=%.1f, avg_price=%.2f, change=%.2f%%",
        summary.avg_listings,
        summary.avg_price_per_sqft,
        summary.price_change_percent,
    )
    return summary


__all__ = ["generate_market_summary"]

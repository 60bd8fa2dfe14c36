"""Simple moving averages over housing record series.

Both variants expect records sorted by date ascending and return
``SmaPoint(index, value)`` pairs whose ``index`` points back into the input so
callers can re-attach dates.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pipelines.model import HousingRecord, SmaPoint

logger = logging.getLogger(__name__)


def _validate_period(period: int) -> None:
    if isinstance(period, bool) or not isinstance(period, int) or period < 1:
        raise ValueError(f"SMA period must be a positive integer, got {period!r}.")


def calculate_price_sma(records: Sequence[HousingRecord], period: int) -> list[SmaPoint]:
    """Average ``price_per_sqft`` over each trailing window of ``period`` records.

    Missing prices are ignored: the divisor is the number of known prices in
    the window. Windows without any known price produce no point.
    """

    _validate_period(period)
    if len(records) < period:
        logger.debug(
            "Not enough data points (%s) for SMA period %s", len(records), period
        )
        return []

    points: list[SmaPoint] = []
    for i in range(period - 1, len(records)):
        total = 0.0
        count = 0
        for record in records[i - period + 1 : i + 1]:
            if record.price_per_sqft is not None:
                total += record.price_per_sqft
                count += 1
        if count:
            value = total / count
            points.append(SmaPoint(i, value))
            logger.debug("Price SMA at index %s: %.2f", i, value)

    logger.info("Calculated %s price SMA values for period %s", len(points), period)
    return points


def calculate_listings_sma(
    records: Sequence[HousingRecord], period: int
) -> list[SmaPoint]:
    """Average ``active_listings`` over each trailing window of ``period`` records."""

    _validate_period(period)
    if len(records) < period:
        return []

    points = [
        SmaPoint(i, sum(r.active_listings for r in records[i - period + 1 : i + 1]) / period)
        for i in range(period - 1, len(records))
    ]
    logger.info("Calculated %s listing SMA values for period %s", len(points), period)
    return points


__all__ = ["calculate_price_sma", "calculate_listings_sma"]

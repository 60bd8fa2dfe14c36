"""Standard-deviation based outlier removal for the price series."""

from __future__ import annotations

import logging
import math
from typing import MutableSequence

from pipelines.model import HousingRecord

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_SIGMA = 3.0
MIN_SAMPLE_SIZE = 3


def remove_outliers(
    records: MutableSequence[HousingRecord],
    threshold_sigma: float = DEFAULT_THRESHOLD_SIGMA,
) -> int:
    """Null out prices further than ``threshold_sigma`` population std devs from the mean.

    Does nothing when fewer than ``MIN_SAMPLE_SIZE`` prices are known. Returns
    the number of prices removed.
    """

    prices = [r.price_per_sqft for r in records if r.price_per_sqft is not None]
    if len(prices) < MIN_SAMPLE_SIZE:
        return 0

    mean = sum(prices) / len(prices)
    variance = sum((p - mean) ** 2 for p in prices) / len(prices)
    std_dev = math.sqrt(variance)
    threshold = threshold_sigma * std_dev

    removed = 0
    for record in records:
        price = record.price_per_sqft
        if price is not None and abs(price - mean) > threshold:
            logger.debug(
                "Removing outlier: %.2f (mean: %.2f, std_dev: %.2f)", price, mean, std_dev
            )
            record.price_per_sqft = None
            removed += 1

    if removed:
        logger.info(
            "Removed %s outliers (mean=%.2f, std_dev=%.2f)", removed, mean, std_dev
        )
    return removed


__all__ = ["remove_outliers", "DEFAULT_THRESHOLD_SIGMA", "MIN_SAMPLE_SIZE"]

"""Fill gaps in the price series from neighbouring known values."""

from __future__ import annotations

import logging
from typing import MutableSequence

from pipelines.model import HousingRecord

logger = logging.getLogger(__name__)


def _next_known_prices(records: MutableSequence[HousingRecord]) -> list[float | None]:
    """For each index, the first known price strictly after it in the input."""

    following: list[float | None] = [None] * len(records)
    upcoming: float | None = None
    for i in range(len(records) - 1, -1, -1):
        following[i] = upcoming
        if records[i].price_per_sqft is not None:
            upcoming = records[i].price_per_sqft
    return following


def interpolate_missing_prices(records: MutableSequence[HousingRecord]) -> int:
    """Replace missing prices with the midpoint of the nearest known neighbours.

    The backward neighbour is read from the live buffer, so a gap sees values
    filled earlier in the same pass (``[100, None, None, 200]`` becomes
    ``[100, 150, 175, 200]``). The forward neighbour always comes from data not
    yet visited. Gaps at either end of the series stay missing.

    Returns the number of prices filled.
    """

    following = _next_known_prices(records)
    previous: float | None = None
    filled = 0

    for i, record in enumerate(records):
        if record.price_per_sqft is None:
            upcoming = following[i]
            if previous is not None and upcoming is not None:
                record.price_per_sqft = (previous + upcoming) / 2.0
                filled += 1
                logger.debug(
                    "Interpolated price at index %s: %.2f", i, record.price_per_sqft
                )
        if record.price_per_sqft is not None:
            previous = record.price_per_sqft

    if filled:
        logger.info("Interpolated %s missing data points", filled)
    return filled


__all__ = ["interpolate_missing_prices"]

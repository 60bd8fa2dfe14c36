"""Ordered cleaning stages and the end-to-end analysis entry point.

Cleaning mutates a buffer of records in a fixed order: outliers are nulled
first, then interpolation fills the gaps that remain (including the ones the
outlier stage just created). Trend and summary computations only read the
cleaned buffer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, MutableSequence, Sequence

from analytics.interpolation import interpolate_missing_prices
from analytics.moving_average import calculate_listings_sma, calculate_price_sma
from analytics.outliers import remove_outliers
from analytics.summary import generate_market_summary
from jobs.config import AnalysisConfig
from pipelines.model import HousingRecord, MarketSummary, SmaPoint

logger = logging.getLogger(__name__)

StageFn = Callable[[MutableSequence[HousingRecord], AnalysisConfig], int]


@dataclass(frozen=True)
class Stage:
    """A named in-place transformation returning how many values it changed."""

    name: str
    apply: StageFn


CLEANING_STAGES: tuple[Stage, ...] = (
    Stage("remove_outliers", lambda buffer, cfg: remove_outliers(buffer, cfg.outlier_sigma)),
    Stage("interpolate_gaps", lambda buffer, _cfg: interpolate_missing_prices(buffer)),
)


@dataclass(frozen=True)
class MarketAnalysis:
    """Cleaned series plus the trend and summary artifacts derived from it."""

    records: tuple[HousingRecord, ...]
    outliers_removed: int
    gaps_filled: int
    price_sma: dict[int, list[SmaPoint]]
    listings_sma: dict[int, list[SmaPoint]]
    summary: MarketSummary


def run_cleaning_stages(
    buffer: MutableSequence[HousingRecord],
    config: AnalysisConfig | None = None,
    stages: Sequence[Stage] = CLEANING_STAGES,
) -> dict[str, int]:
    """Apply ``stages`` in order to a caller-owned buffer and report per-stage counts."""

    config = config or AnalysisConfig()
    counts: dict[str, int] = {}
    for stage in stages:
        counts[stage.name] = stage.apply(buffer, config)
        logger.debug("Stage %s changed %s values", stage.name, counts[stage.name])
    return counts


def prepare_buffer(records: Iterable[HousingRecord]) -> list[HousingRecord]:
    """Return date-sorted deep copies of ``records``; duplicate dates are rejected."""

    buffer = sorted((r.model_copy(deep=True) for r in records), key=lambda r: r.date)
    for earlier, later in zip(buffer, buffer[1:]):
        if earlier.date == later.date:
            raise ValueError(f"Duplicate record for date {later.date.isoformat()}.")
    return buffer


def analyze(
    records: Iterable[HousingRecord], config: AnalysisConfig | None = None
) -> MarketAnalysis:
    """Clean a copy of ``records`` and compute SMA series and the market summary.

    The caller's records are never mutated. Summary errors
    (``EmptyDatasetError``/``NoValidPriceDataError``) propagate unchanged.
    """

    config = config or AnalysisConfig()
    buffer = prepare_buffer(records)
    counts = run_cleaning_stages(buffer, config)

    price_sma = {period: calculate_price_sma(buffer, period) for period in config.sma_periods}
    listings_sma = {
        period: calculate_listings_sma(buffer, period) for period in config.sma_periods
    }
    summary = generate_market_summary(buffer)

    return MarketAnalysis(
        records=tuple(buffer),
        outliers_removed=counts["remove_outliers"],
        gaps_filled=counts["interpolate_gaps"],
        price_sma=price_sma,
        listings_sma=listings_sma,
        summary=summary,
    )


__all__ = [
    "CLEANING_STAGES",
    "MarketAnalysis",
    "Stage",
    "analyze",
    "prepare_buffer",
    "run_cleaning_stages",
]

"""Canonical data model for daily housing market observations."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DataSource(str, Enum):
    """Acquisition channel that produced a record."""

    HISTORICAL = "historical"
    SCRAPED = "scraped"
    PEER = "peer"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class HousingRecord(BaseModel):
    """One observation of the tracked market for a single calendar date."""

    model_config = ConfigDict(validate_assignment=True)

    date: dt.date = Field(..., description="Calendar day this observation represents.")
    active_listings: int = Field(
        ..., ge=0, description="Number of active property listings on this date."
    )
    price_per_sqft: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Average listing price per square foot; None when unknown.",
    )
    source: DataSource = Field(..., description="Acquisition channel of the record.")
    last_updated: dt.datetime = Field(
        default_factory=_utcnow,
        description="When the record was last written by this system.",
    )

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Any:
        if isinstance(value, dt.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(dt.UTC)
            return value.date()
        return value

    @field_validator("last_updated", mode="after")
    @classmethod
    def _ensure_utc(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class SmaPoint(NamedTuple):
    """A moving-average value aligned to a position in the input sequence."""

    index: int
    value: float


class MarketSummary(BaseModel):
    """Descriptive statistics for a window of housing records."""

    model_config = ConfigDict(frozen=True)

    avg_listings: float
    avg_price_per_sqft: float
    min_price_per_sqft: float
    max_price_per_sqft: float
    price_change_percent: float
    data_points: int


__all__ = ["DataSource", "HousingRecord", "SmaPoint", "MarketSummary"]

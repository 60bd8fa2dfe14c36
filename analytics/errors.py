"""Errors raised by the analytics pipeline."""

from __future__ import annotations


class SummaryError(ValueError):
    """Raised when a market summary cannot be produced from the input."""


class EmptyDatasetError(SummaryError):
    """Raised when the input sequence holds no records."""


class NoValidPriceDataError(SummaryError):
    """Raised when every record in the input lacks a price."""


__all__ = ["SummaryError", "EmptyDatasetError", "NoValidPriceDataError"]

"""Static configuration for the tracked market and the analytics run."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_ZIP_CODE = "90720"
DEFAULT_SMA_PERIODS: tuple[int, ...] = (7, 30, 90)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for one pass of the analytics pipeline."""

    sma_periods: tuple[int, ...] = DEFAULT_SMA_PERIODS
    outlier_sigma: float = 3.0
    lookback_days: int = 365

    def __post_init__(self) -> None:
        if any(period < 1 for period in self.sma_periods):
            raise ValueError(f"SMA periods must be positive, got {self.sma_periods}.")
        if self.outlier_sigma <= 0:
            raise ValueError("outlier_sigma must be positive.")
        if self.lookback_days < 1:
            raise ValueError("lookback_days must be at least 1.")


@dataclass(frozen=True)
class AppConfig:
    """Configuration describing which market to track and how to refresh it."""

    zip_code: str = DEFAULT_ZIP_CODE
    update_interval_hours: int = 12
    cache_max_age_days: int = 30
    enable_peer_sync: bool = False
    peer_urls: tuple[str, ...] = ()
    enable_debug_logging: bool = False
    scrape_rate_limit_seconds: float = 60.0
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}.")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc


def parse_periods(raw: str) -> tuple[int, ...]:
    """Parse a comma-separated list of SMA periods such as ``"7,30,90"``."""

    periods = tuple(
        _parse_int("SMA period", item.strip()) for item in raw.split(",") if item.strip()
    )
    if not periods:
        raise ValueError("At least one SMA period is required.")
    return periods


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    """Build an ``AppConfig`` from environment variables, falling back to defaults."""

    if env is None:
        load_dotenv()
        env = os.environ

    defaults = AppConfig()
    analysis_defaults = defaults.analysis

    analysis = AnalysisConfig(
        sma_periods=parse_periods(env["SMA_PERIODS"])
        if env.get("SMA_PERIODS")
        else analysis_defaults.sma_periods,
        outlier_sigma=_parse_float("OUTLIER_SIGMA", env["OUTLIER_SIGMA"])
        if env.get("OUTLIER_SIGMA")
        else analysis_defaults.outlier_sigma,
        lookback_days=_parse_int("LOOKBACK_DAYS", env["LOOKBACK_DAYS"])
        if env.get("LOOKBACK_DAYS")
        else analysis_defaults.lookback_days,
    )

    raw_peers = env.get("PEER_URLS", "")
    peer_urls = tuple(url.strip().rstrip("/") for url in raw_peers.split(",") if url.strip())

    return AppConfig(
        zip_code=env.get("RE_TRACKER_ZIP") or defaults.zip_code,
        update_interval_hours=_parse_int(
            "UPDATE_INTERVAL_HOURS",
            env.get("UPDATE_INTERVAL_HOURS") or str(defaults.update_interval_hours),
        ),
        cache_max_age_days=_parse_int(
            "CACHE_MAX_AGE_DAYS",
            env.get("CACHE_MAX_AGE_DAYS") or str(defaults.cache_max_age_days),
        ),
        enable_peer_sync=_parse_bool("ENABLE_PEER_SYNC", env.get("ENABLE_PEER_SYNC", "")),
        peer_urls=peer_urls,
        enable_debug_logging=_parse_bool(
            "ENABLE_DEBUG_LOGGING", env.get("ENABLE_DEBUG_LOGGING", "")
        ),
        scrape_rate_limit_seconds=_parse_float(
            "SCRAPE_RATE_LIMIT_SECONDS",
            env.get("SCRAPE_RATE_LIMIT_SECONDS") or str(defaults.scrape_rate_limit_seconds),
        ),
        analysis=analysis,
    )


__all__ = [
    "AnalysisConfig",
    "AppConfig",
    "DEFAULT_SMA_PERIODS",
    "DEFAULT_ZIP_CODE",
    "load_config",
    "parse_periods",
]

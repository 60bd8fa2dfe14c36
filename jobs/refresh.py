"""Batch job that refreshes the local store from every acquisition channel."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timedelta, UTC

import duckdb

from jobs.config import AppConfig, load_config
from pipelines.model import HousingRecord
from pipelines.sources.historical import generate_historical_records
from pipelines.sources.peer import fetch_all_peers
from pipelines.sources.scraper import scrape_listing_snapshot
from storage.db import bulk_upsert, connect, fetch_latest

logger = logging.getLogger(__name__)


def configure_logging(config: AppConfig, level: str | None = None) -> None:
    if config.enable_debug_logging:
        level = "DEBUG"
    logging.basicConfig(level=(level or os.getenv("LOG_LEVEL", "INFO")).upper())


def needs_backfill(
    latest: HousingRecord | None, config: AppConfig, *, now: datetime | None = None
) -> bool:
    """True when the store is empty or its newest record is older than the cache age."""

    if latest is None:
        return True
    today = (now or datetime.now(UTC)).date()
    return today - latest.date > timedelta(days=config.cache_max_age_days)


def backfill_history(
    conn: duckdb.DuckDBPyConnection, config: AppConfig, *, force: bool = False
) -> int:
    """Persist synthetic history unless the store already holds fresh data."""

    if not force and not needs_backfill(fetch_latest(conn), config):
        logger.info(
            "Store is fresher than %s days; skipping historical backfill.",
            config.cache_max_age_days,
        )
        return 0
    return bulk_upsert(conn, generate_historical_records(config))


async def refresh_async(
    config: AppConfig | None = None,
    *,
    conn: duckdb.DuckDBPyConnection | None = None,
    force: bool = False,
    scrape: bool = True,
    site: str = "zillow",
) -> int:
    """Backfill history, take a scrape snapshot and pull peers; returns rows written."""

    config = config or load_config()
    owns_connection = conn is None
    conn = conn or connect()
    try:
        total_written = backfill_history(conn, config, force=force)

        # Local snapshots go last so they win over peer rows for the same date.
        collected: list[HousingRecord] = []
        if config.enable_peer_sync and config.peer_urls:
            collected.extend(
                await fetch_all_peers(config.peer_urls, days=config.analysis.lookback_days)
            )
        else:
            logger.info("Peer sync disabled or no peers configured; skipping.")

        if scrape:
            collected.append(await scrape_listing_snapshot(config, site=site))

        if collected:
            total_written += bulk_upsert(conn, collected)
        return total_written
    finally:
        if owns_connection:
            conn.close()


def main(config: AppConfig | None = None) -> int:
    config = config or load_config()
    configure_logging(config)
    written = asyncio.run(refresh_async(config))
    logger.info("Refresh job finished (records written=%s).", written)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""Command-line entrypoint for batch jobs."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, UTC

from analytics.errors import SummaryError
from analytics.pipeline import MarketAnalysis, analyze
from jobs.config import AppConfig, load_config, parse_periods
from jobs.refresh import backfill_history, configure_logging, refresh_async
from pipelines.model import HousingRecord
from pipelines.sources.peer import fetch_all_peers
from pipelines.sources.scraper import SCRAPE_TARGETS, scrape_listing_snapshot
from storage.db import (
    bulk_upsert,
    connect,
    count_records,
    fetch_latest,
    fetch_range,
    upsert_record,
)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return parsed


def _format_record(record: HousingRecord) -> str:
    price = f"${record.price_per_sqft:.2f}" if record.price_per_sqft is not None else "(unknown)"
    return (
        f"date={record.date.isoformat()} listings={record.active_listings} "
        f"price_per_sqft={price} source={record.source.value}"
    )


def _format_analysis(analysis: MarketAnalysis) -> list[str]:
    summary = analysis.summary
    lines = [
        f"data_points={summary.data_points} outliers_removed={analysis.outliers_removed} "
        f"gaps_filled={analysis.gaps_filled}",
        f"avg_listings={summary.avg_listings:.1f}",
        f"avg_price_per_sqft=${summary.avg_price_per_sqft:.2f} "
        f"(min ${summary.min_price_per_sqft:.2f}, max ${summary.max_price_per_sqft:.2f})",
        f"price_change={summary.price_change_percent:.2f}%",
    ]
    for period, points in analysis.price_sma.items():
        if not points:
            lines.append(f"sma_{period}: insufficient data")
            continue
        index, value = points[-1]
        listings = analysis.listings_sma[period]
        listings_text = f" listings={listings[-1].value:.1f}" if listings else ""
        lines.append(
            f"sma_{period}: {analysis.records[index].date.isoformat()} "
            f"price=${value:.2f}{listings_text}"
        )
    return lines


def _run_fetch(config: AppConfig, force: bool) -> int:
    conn = connect()
    try:
        written = backfill_history(conn, config, force=force)
    finally:
        conn.close()
    print(f"Stored {written} historical records.")
    return 0


def _run_scrape(config: AppConfig, site: str) -> int:
    record = asyncio.run(scrape_listing_snapshot(config, site=site))
    conn = connect()
    try:
        upsert_record(conn, record)
    finally:
        conn.close()
    print(f"Stored scraped snapshot: {_format_record(record)}")
    return 0


def _run_sync_peers(config: AppConfig) -> int:
    if not config.peer_urls:
        print("No peers configured (set PEER_URLS).")
        return 0
    records = asyncio.run(
        fetch_all_peers(config.peer_urls, days=config.analysis.lookback_days)
    )
    conn = connect()
    try:
        written = bulk_upsert(conn, records)
    finally:
        conn.close()
    print(f"Stored {written} peer records.")
    return 0


def _run_stats() -> int:
    conn = connect()
    try:
        count = count_records(conn)
        latest = fetch_latest(conn)
    finally:
        conn.close()
    print(f"Total data points: {count}")
    if latest is None:
        print("No data in database. Run 'python -m jobs fetch' to populate.")
    else:
        print(f"Latest: {_format_record(latest)}")
    return 0


def _run_analyze(config: AppConfig, days: int | None) -> int:
    end = datetime.now(UTC).date()
    start = end - timedelta(
        days=config.analysis.lookback_days if days is None else days
    )
    conn = connect()
    try:
        records = fetch_range(conn, start, end)
    finally:
        conn.close()
    try:
        analysis = analyze(records, config.analysis)
    except SummaryError as exc:
        print(f"Cannot analyze {start.isoformat()}..{end.isoformat()}: {exc}")
        return 1
    for line in _format_analysis(analysis):
        print(line)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="RE Tracker job runner")
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL for this invocation (e.g. DEBUG, INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_parser = subparsers.add_parser(
        "fetch", help="Backfill historical data into DuckDB"
    )
    fetch_parser.add_argument(
        "--force", action="store_true", help="Backfill even when stored data is fresh"
    )

    scrape_parser = subparsers.add_parser("scrape", help="Store a listing snapshot for today")
    scrape_parser.add_argument("--site", choices=sorted(SCRAPE_TARGETS), default="zillow")

    subparsers.add_parser("sync-peers", help="Pull records from configured peers")
    subparsers.add_parser("refresh", help="Run backfill, scrape and peer sync together")
    subparsers.add_parser("stats", help="Show current database statistics")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Clean the stored series and print trends and summary"
    )
    analyze_parser.add_argument("--days", type=_positive_int, help="Lookback window in days")
    analyze_parser.add_argument("--periods", help="Comma-separated SMA periods (e.g. 7,30)")

    args = parser.parse_args(argv)
    config = load_config()
    configure_logging(config, args.log_level)

    if args.command == "fetch":
        return _run_fetch(config, args.force)
    if args.command == "scrape":
        return _run_scrape(config, args.site)
    if args.command == "sync-peers":
        return _run_sync_peers(config)
    if args.command == "refresh":
        written = asyncio.run(refresh_async(config))
        print(f"Refresh finished (records written={written}).")
        return 0
    if args.command == "stats":
        return _run_stats()
    if args.command == "analyze":
        if args.periods:
            try:
                periods = parse_periods(args.periods)
                config = replace(config, analysis=replace(config.analysis, sma_periods=periods))
            except ValueError as exc:
                parser.error(str(exc))
        return _run_analyze(config, args.days)

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""DuckDB persistence utilities for daily housing records."""

from __future__ import annotations

import datetime as dt
import logging
import os
from pathlib import Path
from typing import Iterable

import duckdb

from pipelines.model import DataSource, HousingRecord

DB_ENV_VAR = "RE_TRACKER_DB_PATH"
DEFAULT_DB_PATH = Path("data/housing_data.duckdb")

HOUSING_DATA_TABLE = "housing_data"
_COLUMNS = "date, active_listings, price_per_sqft, source, last_updated"

logger = logging.getLogger(__name__)


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def get_database_path(override: str | os.PathLike[str] | None = None) -> Path:
    """Resolve the DuckDB file path from an explicit override or environment variable."""

    if override is not None:
        return Path(override)
    env_value = os.getenv(DB_ENV_VAR)
    if env_value:
        return Path(env_value)
    return DEFAULT_DB_PATH


def connect(
    path: str | os.PathLike[str] | None = None,
    *,
    read_only: bool = False,
    ensure: bool = True,
) -> duckdb.DuckDBPyConnection:
    """Create a DuckDB connection, optionally ensuring schema availability."""

    db_path = get_database_path(path)
    if not read_only:
        _ensure_parent_dir(db_path)
    conn = duckdb.connect(str(db_path), read_only=read_only)
    if ensure and not read_only:
        ensure_housing_data_table(conn)
    return conn


def ensure_housing_data_table(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the canonical storage table if it does not already exist."""

    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {HOUSING_DATA_TABLE} (
            date DATE PRIMARY KEY,
            active_listings INTEGER NOT NULL CHECK (active_listings >= 0),
            price_per_sqft DOUBLE CHECK (price_per_sqft IS NULL OR price_per_sqft > 0),
            source TEXT NOT NULL,
            last_updated TIMESTAMP NOT NULL
        )
        """
    )
    conn.execute(
        f"""
        CREATE INDEX IF NOT EXISTS idx_{HOUSING_DATA_TABLE}_updated
        ON {HOUSING_DATA_TABLE} (last_updated)
        """
    )


def _serialize_record(record: HousingRecord) -> tuple:
    # Stored as naive UTC; DuckDB TIMESTAMP has no zone.
    last_updated = record.last_updated.astimezone(dt.UTC).replace(tzinfo=None)
    return (
        record.date,
        record.active_listings,
        record.price_per_sqft,
        DataSource(record.source).value,
        last_updated,
    )


def _row_to_record(row: tuple) -> HousingRecord:
    return HousingRecord(
        date=row[0],
        active_listings=row[1],
        price_per_sqft=row[2],
        source=DataSource(row[3]),
        last_updated=row[4].replace(tzinfo=dt.UTC),
    )


_UPSERT_SQL = (
    f"INSERT OR REPLACE INTO {HOUSING_DATA_TABLE} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)"
)


def upsert_record(conn: duckdb.DuckDBPyConnection, record: HousingRecord) -> None:
    """Insert a record, replacing any existing row for the same date."""

    conn.execute(_UPSERT_SQL, _serialize_record(record))
    logger.debug("Stored data for date: %s", record.date.isoformat())


def bulk_upsert(conn: duckdb.DuckDBPyConnection, records: Iterable[HousingRecord]) -> int:
    """Insert or replace a batch of records atomically.

    When the batch holds several records for one date the last one wins. Any
    failure rolls the whole batch back and re-raises.

    Returns
    -------
    int
        Number of rows written.
    """

    by_date: dict[dt.date, HousingRecord] = {}
    for record in records:
        by_date[record.date] = record
    serialized = [_serialize_record(record) for record in by_date.values()]
    if not serialized:
        return 0

    conn.begin()
    try:
        conn.executemany(_UPSERT_SQL, serialized)
    except Exception:
        conn.rollback()
        logger.error("Bulk insert of %s records failed; rolled back.", len(serialized))
        raise
    conn.commit()
    logger.info("Successfully inserted %s data points", len(serialized))
    return len(serialized)


def fetch_range(
    conn: duckdb.DuckDBPyConnection, start: dt.date, end: dt.date
) -> list[HousingRecord]:
    """Return records with ``start <= date <= end`` ordered oldest first."""

    cursor = conn.execute(
        f"""
        SELECT {_COLUMNS} FROM {HOUSING_DATA_TABLE}
        WHERE date >= ? AND date <= ?
        ORDER BY date ASC
        """,
        [start, end],
    )
    return [_row_to_record(row) for row in cursor.fetchall()]


def fetch_latest(conn: duckdb.DuckDBPyConnection) -> HousingRecord | None:
    """Return the most recent record, or ``None`` when the table is empty."""

    row = conn.execute(
        f"SELECT {_COLUMNS} FROM {HOUSING_DATA_TABLE} ORDER BY date DESC LIMIT 1"
    ).fetchone()
    return _row_to_record(row) if row else None


def count_records(conn: duckdb.DuckDBPyConnection) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {HOUSING_DATA_TABLE}").fetchone()[0]


__all__ = [
    "connect",
    "ensure_housing_data_table",
    "upsert_record",
    "bulk_upsert",
    "fetch_range",
    "fetch_latest",
    "count_records",
    "HOUSING_DATA_TABLE",
    "get_database_path",
]

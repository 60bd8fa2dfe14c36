"""FastAPI service exposing housing records and their derived trends."""

from __future__ import annotations

import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date, datetime, timedelta, UTC
from pathlib import Path
from typing import Any, Sequence

import duckdb
from fastapi import BackgroundTasks, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from dotenv import load_dotenv

from analytics.errors import EmptyDatasetError, NoValidPriceDataError
from analytics.pipeline import MarketAnalysis, analyze
from jobs.config import AnalysisConfig, load_config, parse_periods
from pipelines.model import HousingRecord, SmaPoint
from storage.db import HOUSING_DATA_TABLE, connect, fetch_range
from storage.exports import export_to_csv, export_to_parquet

MAX_DAYS = 3650
ALLOWED_FORMATS = {"json", "csv", "parquet"}
load_dotenv()


@asynccontextmanager
async def lifespan(_: FastAPI):
    conn = connect()
    conn.close()
    yield


app = FastAPI(title="RE Tracker API", version="0.1.0", lifespan=lifespan)


def _configure_cors() -> None:
    raw_origins = os.getenv("API_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )


_configure_cors()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def _date_window(days: int | None, config: AnalysisConfig) -> tuple[date, date]:
    end = datetime.now(UTC).date()
    return end - timedelta(days=days or config.lookback_days), end


def _serialize_records(records: Sequence[HousingRecord]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


def _serialize_series(
    points: Sequence[SmaPoint], records: Sequence[HousingRecord]
) -> list[dict[str, Any]]:
    return [
        {"date": records[index].date.isoformat(), "value": value} for index, value in points
    ]


def _serialize_analysis(analysis: MarketAnalysis) -> dict[str, Any]:
    return {
        "summary": analysis.summary.model_dump(mode="json"),
        "outliers_removed": analysis.outliers_removed,
        "gaps_filled": analysis.gaps_filled,
        "price_sma": {
            str(period): _serialize_series(points, analysis.records)
            for period, points in analysis.price_sma.items()
        },
        "listings_sma": {
            str(period): _serialize_series(points, analysis.records)
            for period, points in analysis.listings_sma.items()
        },
    }


@app.get("/api/data")
def get_data(
    background_tasks: BackgroundTasks,
    format: str = Query("json", description="Response format: json, csv, or parquet"),
    days: int | None = Query(None, ge=1, le=MAX_DAYS, description="Lookback window in days"),
):
    fmt = format.lower()
    if fmt not in ALLOWED_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unsupported format '{format}'.")

    start, end = _date_window(days, load_config().analysis)

    conn = connect(read_only=True)
    try:
        if fmt == "json":
            records = fetch_range(conn, start, end)
            payload = {
                "count": len(records),
                "items": _serialize_records(records),
            }
            return JSONResponse(content=payload)

        query = (
            f"SELECT * FROM {HOUSING_DATA_TABLE} WHERE date >= ? AND date <= ? ORDER BY date"
        )
        suffix = ".csv" if fmt == "csv" else ".parquet"
        media_type = "text/csv" if fmt == "csv" else "application/vnd.apache.parquet"
        filename = f"housing_data{suffix}"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            dest = Path(tmp.name)

        if fmt == "csv":
            export_to_csv(conn, dest, query=query, params=[start, end])
        else:
            export_to_parquet(conn, dest, query=query, params=[start, end])

        def _cleanup(path: Path) -> None:
            try:
                path.unlink()
            except FileNotFoundError:
                pass

        background_tasks.add_task(_cleanup, dest)
        return FileResponse(dest, media_type=media_type, filename=filename, background=background_tasks)
    except duckdb.Error as exc:  # pragma: no cover - defensive
        raise HTTPException(status_code=500, detail="Database query failed") from exc
    finally:
        conn.close()


@app.get("/api/analysis")
def get_analysis(
    days: int | None = Query(None, ge=1, le=MAX_DAYS, description="Lookback window in days"),
    periods: str | None = Query(None, description="Comma-separated SMA periods, e.g. 7,30"),
):
    config = load_config().analysis
    if periods:
        try:
            config = replace(config, sma_periods=parse_periods(periods))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    start, end = _date_window(days, config)
    conn = connect(read_only=True)
    try:
        records = fetch_range(conn, start, end)
    except duckdb.Error as exc:  # pragma: no cover - defensive
        raise HTTPException(status_code=500, detail="Database query failed") from exc
    finally:
        conn.close()

    try:
        analysis = analyze(records, config)
    except EmptyDatasetError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except NoValidPriceDataError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return JSONResponse(content=_serialize_analysis(analysis))

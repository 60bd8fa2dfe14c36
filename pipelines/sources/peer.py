"""Pull records published by other RE Tracker instances.

Peers expose the same ``/api/data`` JSON document this service serves. Every
record received this way is tagged ``DataSource.PEER`` regardless of how the
peer obtained it.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import httpx
from pydantic import ValidationError

from pipelines.common import fetch_json
from pipelines.model import DataSource, HousingRecord

logger = logging.getLogger(__name__)

PEER_DATA_PATH = "/api/data"


def _extract_items(payload: Any) -> list[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("items", [])
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, Mapping)]


def _to_record(item: Mapping[str, Any]) -> HousingRecord | None:
    fields = {
        key: item.get(key)
        for key in ("date", "active_listings", "price_per_sqft", "last_updated")
        if item.get(key) is not None
    }
    try:
        return HousingRecord(**fields, source=DataSource.PEER)
    except ValidationError as exc:
        logger.warning("Skipping malformed peer record %r: %s", item, exc.errors()[0]["msg"])
        return None


async def fetch_peer_records(base_url: str, *, days: int | None = None) -> list[HousingRecord]:
    """Fetch and normalize records from a single peer; failures yield ``[]``."""

    url = f"{base_url.rstrip('/')}{PEER_DATA_PATH}"
    params = {"days": days} if days else None
    try:
        payload = await fetch_json(url, params=params)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Peer fetch from %s failed (%s). Skipping.", url, exc)
        return []

    records = [record for item in _extract_items(payload) if (record := _to_record(item))]
    logger.info("Received %s records from peer %s", len(records), base_url)
    return records


async def fetch_all_peers(
    peer_urls: Iterable[str], *, days: int | None = None
) -> list[HousingRecord]:
    """Merge records from every peer; later peers win on duplicate dates."""

    merged: dict[Any, HousingRecord] = {}
    for base_url in peer_urls:
        for record in await fetch_peer_records(base_url, days=days):
            merged[record.date] = record
    return sorted(merged.values(), key=lambda r: r.date)


__all__ = ["fetch_peer_records", "fetch_all_peers", "PEER_DATA_PATH"]

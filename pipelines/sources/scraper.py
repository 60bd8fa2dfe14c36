"""Point-in-time listing snapshots from real-estate search sites.

Listing pages need JavaScript rendering and sit behind anti-scraping measures,
so snapshots are synthetic. The rate limit is still honoured so schedules
behave the same once a real fetch is wired in.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Mapping

from jobs.config import AppConfig
from pipelines.model import DataSource, HousingRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrapeTarget:
    """Search URL template and the synthetic reading returned for it."""

    url_template: str
    listings_count: int
    price_per_sqft: float

    def url_for(self, zip_code: str) -> str:
        return self.url_template.format(zip_code=zip_code)


SCRAPE_TARGETS: Mapping[str, ScrapeTarget] = {
    "zillow": ScrapeTarget("https://www.zillow.com/homes/{zip_code}_rb/", 42, 455.0),
    "redfin": ScrapeTarget("https://www.redfin.com/zipcode/{zip_code}", 45, 458.0),
}


async def scrape_listing_snapshot(
    config: AppConfig,
    *,
    site: str = "zillow",
    now: datetime | None = None,
) -> HousingRecord:
    """Return today's listing snapshot for ``config.zip_code`` from ``site``."""

    target = SCRAPE_TARGETS.get(site)
    if target is None:
        raise ValueError(
            f"Unknown scrape site '{site}'. Expected one of: {', '.join(sorted(SCRAPE_TARGETS))}."
        )

    url = target.url_for(config.zip_code)
    logger.info("Scraping %s for ZIP %s (%s)", site, config.zip_code, url)
    logger.warning("Using synthetic scraped data; live %s scraping is not implemented.", site)

    now = now or datetime.now(UTC)
    record = HousingRecord(
        date=now,
        active_listings=target.listings_count,
        price_per_sqft=target.price_per_sqft,
        source=DataSource.SCRAPED,
        last_updated=now,
    )
    logger.info(
        "Scraped %s active listings at $%.2f/sqft", record.active_listings, record.price_per_sqft
    )

    if config.scrape_rate_limit_seconds > 0:
        logger.debug("Waiting %s seconds for rate limit", config.scrape_rate_limit_seconds)
        await asyncio.sleep(config.scrape_rate_limit_seconds)
    return record


__all__ = ["SCRAPE_TARGETS", "ScrapeTarget", "scrape_listing_snapshot"]

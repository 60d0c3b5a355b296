"""Scrape Orchestrator: runs every enabled platform with per-platform failure isolation."""

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.api.fetcher import ResilientFetcher
from app.config import Settings
from app.scrapers import SourceAdapter, build_adapters
from app.services.alert_matcher import AlertMatcher
from app.services.alert_store import AlertStore
from app.services.listing_store import ListingStore
from app.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


class ScrapeOrchestrator:
    def __init__(
        self,
        config: Settings,
        adapters: Sequence[SourceAdapter],
        matcher: Optional[AlertMatcher] = None,
        db: Optional[Session] = None,
    ):
        self.config = config
        self.adapters = list(adapters)
        self.matcher = matcher
        self.db = db

    @classmethod
    def from_session(
        cls,
        config: Settings,
        db: Session,
        fetcher: ResilientFetcher,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> "ScrapeOrchestrator":
        """Wire stores, adapters and the alert matcher around one database session."""
        store = ListingStore(db)
        matcher = AlertMatcher(AlertStore(db), dispatcher or NotificationDispatcher(config))
        return cls(config, build_adapters(config, fetcher, store), matcher=matcher, db=db)

    async def run_all(self) -> dict:
        """
        Run each adapter over the configured location x category matrix.

        Never raises. Returns:
            ``results``: platform -> {success, count, skipped, error}
            ``total``: sum of stored listings, including partial runs
            ``alerts``: alert matching summary for listings created in this run
        """
        locations = self.config.locations
        categories = self.config.categories
        logger.info(
            f"Starting scrape run: {len(self.adapters)} platforms, "
            f"locations={locations}, categories={categories}"
        )

        results: dict[str, dict] = {}
        new_listings = []

        for adapter in self.adapters:
            platform = adapter.platform
            logger.info(f"Starting {platform} scraper...")
            try:
                report = await adapter.scrape(locations, categories)
            except Exception as e:
                logger.error(f"{platform} scraper error: {e}")
                if self.db is not None:
                    self.db.rollback()
                results[platform] = {"success": False, "count": 0, "skipped": 0, "error": str(e)}
                continue

            # A stopped platform is a failure, but rows it committed before stopping stay
            results[platform] = {
                "success": report.error is None,
                "count": report.count,
                "skipped": report.skipped,
                "error": report.error,
            }
            new_listings.extend(report.new_listings)
            if report.error:
                logger.error(f"{platform} scraper stopped after {report.count} listings: {report.error}")
            else:
                logger.info(f"{platform}: {report.count} listings scraped ({len(report.new_listings)} new)")

        total = sum(r["count"] for r in results.values())
        alerts = await self._process_alerts(new_listings)

        logger.info(f"Scrape run complete: {total} listings across {len(results)} platforms")
        return {"results": results, "total": total, "alerts": alerts}

    async def _process_alerts(self, new_listings: list) -> dict:
        if self.matcher is None or not new_listings:
            return {"processed": len(new_listings), "matched": 0, "notified": 0}
        try:
            return await self.matcher.process_new_listings(new_listings)
        except Exception as e:
            logger.error(f"Alert processing failed: {e}")
            if self.db is not None:
                self.db.rollback()
            return {"processed": 0, "matched": 0, "notified": 0, "error": str(e)}

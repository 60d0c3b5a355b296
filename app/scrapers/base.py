"""Source Adapter: runs a platform parse strategy over the location x category matrix."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from app.api.fetcher import ResilientFetcher
from app.config import Settings
from app.errors import NetworkError, RateLimitedError, ValidationError
from app.models import Listing

if TYPE_CHECKING:
    from app.services.listing_store import ListingStore

logger = logging.getLogger(__name__)


class ParseStrategy(Protocol):
    """Platform-specific URL building and markup parsing.

    ``parse`` returns raw candidate dicts; it never touches the database.
    """

    platform: str
    delay_seconds: float
    location_independent: bool

    def build_url(self, location: str, category: str) -> Optional[str]:
        ...

    def request_headers(self) -> dict[str, str]:
        ...

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        ...


@dataclass
class ItemResult:
    """Outcome for one candidate: stored or skipped with a reason."""

    status: str
    url: Optional[str] = None
    reason: Optional[str] = None
    created: bool = False

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class ScrapeReport:
    platform: str
    items: list[ItemResult] = field(default_factory=list)
    new_listings: list[Listing] = field(default_factory=list)
    skipped_cells: list[str] = field(default_factory=list)
    # Set when the platform stopped early; items gathered before that still count
    error: Optional[str] = None

    @property
    def count(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def skipped(self) -> int:
        return sum(1 for item in self.items if not item.ok)


class SourceAdapter:
    """Uniform ``scrape(locations, categories)`` capability for one platform."""

    def __init__(
        self,
        strategy: ParseStrategy,
        fetcher: ResilientFetcher,
        store: ListingStore,
        config: Settings,
    ):
        self.strategy = strategy
        self.fetcher = fetcher
        self.store = store
        self.config = config

    @property
    def platform(self) -> str:
        return self.strategy.platform

    async def scrape(self, locations: list[str], categories: list[str]) -> ScrapeReport:
        """
        Fetch, parse and upsert every (location, category) cell in order.

        Per-item failures are recorded as skipped items; a NetworkError skips
        only its cell. RateLimitedError stops the platform: the report comes
        back with ``error`` set and keeps whatever was stored before it.
        """
        report = ScrapeReport(platform=self.platform)
        first_request = True

        # Online retailers serve one catalogue regardless of location
        if getattr(self.strategy, "location_independent", False):
            locations = locations[:1]

        for location in locations:
            for category in categories:
                cell = f"{category} in {location}"
                url = self.strategy.build_url(location, category)
                if not url:
                    logger.debug(f"{self.platform}: skipping unsupported cell {cell}")
                    continue

                if not first_request:
                    await self.fetcher.pause(self.strategy.delay_seconds)
                first_request = False

                try:
                    response = await self.fetcher.fetch(
                        url,
                        timeout=self.config.scrape_timeout_seconds,
                        headers=self.strategy.request_headers(),
                    )
                except RateLimitedError as e:
                    logger.error(f"{self.platform}: stopped at {cell}: {e}")
                    report.error = str(e)
                    return report
                except NetworkError as e:
                    logger.warning(f"{self.platform}: error scraping {cell}: {e}")
                    report.skipped_cells.append(cell)
                    continue

                try:
                    candidates = self.strategy.parse(
                        response.text, location, category, self.config.max_results_per_search
                    )
                except Exception as e:
                    logger.warning(f"{self.platform}: failed to parse {cell}: {e}")
                    report.skipped_cells.append(cell)
                    continue

                if not candidates:
                    logger.info(f"{self.platform}: no listings found for {cell}")
                    continue

                for candidate in candidates:
                    report.items.append(self._store(candidate, report))

                logger.info(f"{self.platform}: found {len(candidates)} items for {cell}")

        return report

    def _store(self, candidate: dict[str, Any], report: ScrapeReport) -> ItemResult:
        url = candidate.get("url")
        try:
            result = self.store.upsert({**candidate, "platform": self.platform, "is_active": True})
        except ValidationError as e:
            logger.warning(f"{self.platform}: skipping listing {url}: {e}")
            return ItemResult(status="skipped", url=url, reason=str(e))

        if result.created:
            report.new_listings.append(result.listing)
        return ItemResult(status="ok", url=result.listing.url, created=result.created)

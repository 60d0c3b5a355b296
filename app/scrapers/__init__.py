"""Source adapters and the per-platform parse strategies behind them."""

import logging

from app.models.enums import PLATFORM_ORDER, Platform
from app.scrapers.base import ItemResult, ParseStrategy, ScrapeReport, SourceAdapter
from app.scrapers.craigslist import CraigslistStrategy
from app.scrapers.ebay import EbayStrategy
from app.scrapers.nextdoor import NextdoorStrategy
from app.scrapers.offerup import OfferUpStrategy
from app.scrapers.retail import ikea_strategy, overstock_strategy, walmart_strategy, wayfair_strategy

logger = logging.getLogger(__name__)

# Facebook Marketplace needs a logged-in browser session, so it has no strategy or toggle
STRATEGY_FACTORIES = {
    Platform.CRAIGSLIST.value: CraigslistStrategy,
    Platform.OFFERUP.value: OfferUpStrategy,
    Platform.EBAY.value: EbayStrategy,
    Platform.NEXTDOOR.value: NextdoorStrategy,
    Platform.WALMART.value: walmart_strategy,
    Platform.IKEA.value: ikea_strategy,
    Platform.WAYFAIR.value: wayfair_strategy,
    Platform.OVERSTOCK.value: overstock_strategy,
}


def build_adapters(config, fetcher, store) -> list[SourceAdapter]:
    """Adapters for every enabled platform with a shipped strategy, in visiting order."""
    adapters = []
    for platform in PLATFORM_ORDER:
        name = platform.value
        if not config.platform_enabled(name):
            logger.info(f"{name} scraper disabled")
            continue
        factory = STRATEGY_FACTORIES.get(name)
        if factory is None:
            logger.info(f"{name} has no scraper available, skipping")
            continue
        adapters.append(SourceAdapter(factory(config), fetcher, store, config))
    return adapters


__all__ = [
    "ItemResult",
    "ParseStrategy",
    "ScrapeReport",
    "SourceAdapter",
    "STRATEGY_FACTORIES",
    "build_adapters",
]

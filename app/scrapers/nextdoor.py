"""Nextdoor For Sale & Free parsing. Only works with a logged-in session cookie."""

import logging
import re
from typing import Any, Optional

from app.scrapers.parsing import absolute_url, cookie_header, image_list, make_soup, text_of

logger = logging.getLogger(__name__)

NEXTDOOR_HOST = "https://nextdoor.com"

LOCATION_SLUGS = {
    "new york": "new-york-ny",
    "newyork": "new-york-ny",
    "los angeles": "los-angeles-ca",
    "chicago": "chicago-il",
    "miami": "miami-fl",
    "san francisco": "san-francisco-ca",
    "austin": "austin-tx",
}

CARD_SELECTOR = '.post-card, .for-sale-post, [data-testid="for-sale-item"]'
TITLE_SELECTOR = '.post-title, h3, [data-testid="post-title"]'
PRICE_SELECTOR = '.price, [data-testid="price"]'
BODY_SELECTOR = ".post-body, .description"

MAX_DESCRIPTION = 500


def slug_for(location: str) -> str:
    key = location.strip().lower()
    return LOCATION_SLUGS.get(key) or re.sub(r"[^a-z0-9]+", "-", key).strip("-")


class NextdoorStrategy:
    platform = "nextdoor"
    delay_seconds = 2.0
    location_independent = False

    def __init__(self, config=None):
        self.config = config

    def _cookies(self) -> Optional[str]:
        return cookie_header(self.config.nextdoor_cookies if self.config else None)

    def build_url(self, location: str, category: str) -> Optional[str]:
        # Listing pages redirect to a login wall without a session
        if not self._cookies():
            logger.debug("Nextdoor cookies not configured, skipping")
            return None
        return f"{NEXTDOOR_HOST}/for_sale_and_free/{slug_for(location)}/"

    def request_headers(self) -> dict[str, str]:
        headers = {"Referer": f"{NEXTDOOR_HOST}/"}
        cookies = self._cookies()
        if cookies:
            headers["Cookie"] = cookies
        return headers

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        soup = make_soup(html)

        listings = []
        for card in soup.select(CARD_SELECTOR)[:limit]:
            title = text_of(card, TITLE_SELECTOR)
            link = card.select_one("a[href]")
            url = absolute_url(link.get("href") if link else None, NEXTDOOR_HOST)
            if not title or not url:
                continue

            listings.append({
                "title": title,
                "description": text_of(card, BODY_SELECTOR)[:MAX_DESCRIPTION],
                "category": category,
                "price": text_of(card, PRICE_SELECTOR),
                "location": location,
                "url": url,
                "image_urls": image_list(card, "img", NEXTDOOR_HOST),
            })

        return listings

"""OfferUp search parsing (server-rendered item cards)."""

from typing import Any, Optional
from urllib.parse import urlencode

from app.scrapers.parsing import absolute_url, cookie_header, image_list, make_soup, text_of

OFFERUP_HOST = "https://offerup.com"


class OfferUpStrategy:
    platform = "offerup"
    delay_seconds = 1.5
    location_independent = False

    def __init__(self, config=None):
        self.config = config

    def build_url(self, location: str, category: str) -> Optional[str]:
        return f"{OFFERUP_HOST}/search/?{urlencode({'q': category, 'location': location})}"

    def request_headers(self) -> dict[str, str]:
        cookies = cookie_header(self.config.offerup_cookies if self.config else None)
        return {"Cookie": cookies} if cookies else {}

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        soup = make_soup(html)

        listings = []
        for card in soup.select('[data-testid="item-card"]')[:limit]:
            title = text_of(card, '[data-testid="item-title"]')
            link = card.select_one("a[href]")
            url = absolute_url(link.get("href") if link else None, OFFERUP_HOST)
            if not title or not url:
                continue

            listings.append({
                "title": title,
                "description": "",
                "category": category,
                "price": text_of(card, '[data-testid="item-price"]'),
                "location": location,
                "url": url,
                "image_urls": image_list(card, "img", OFFERUP_HOST),
            })

        return listings

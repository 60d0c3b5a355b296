"""Craigslist search-result parsing."""

import re
from typing import Any, Optional

from app.scrapers.parsing import absolute_url, image_list, make_soup, text_of

CATEGORY_CODES = {
    "furniture": "fua",
    "apartments": "apa",
    "motorcycles": "mca",
    "autos": "cta",
}

SUBDOMAINS = {
    "new york": "newyork",
    "newyork": "newyork",
    "los angeles": "losangeles",
    "losangeles": "losangeles",
    "chicago": "chicago",
    "san francisco": "sfbay",
    "sfbay": "sfbay",
    "seattle": "seattle",
    "boston": "boston",
}


def subdomain_for(location: str) -> str:
    key = location.strip().lower()
    return SUBDOMAINS.get(key) or re.sub(r"[^a-z0-9]", "", key) or "newyork"


class CraigslistStrategy:
    platform = "craigslist"
    delay_seconds = 1.0
    location_independent = False

    def __init__(self, config=None):
        self.config = config

    def build_url(self, location: str, category: str) -> Optional[str]:
        code = CATEGORY_CODES.get(category)
        if not code:
            return None
        return f"https://{subdomain_for(location)}.craigslist.org/search/{code}"

    def request_headers(self) -> dict[str, str]:
        return {}

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        base = f"https://{subdomain_for(location)}.craigslist.org/"
        soup = make_soup(html)

        listings = []
        for card in soup.select(".cl-static-search-result")[:limit]:
            title = text_of(card, ".title") or (card.get("title") or "").strip()
            link = card.select_one("a.main") or card.select_one("a")
            url = absolute_url(link.get("href") if link else None, base)
            if not title or not url:
                continue

            listings.append({
                "title": title,
                "description": "",
                "category": category,
                "price": text_of(card, ".price"),
                "location": text_of(card, ".location") or location,
                "url": url,
                "image_urls": image_list(card, "img", base),
            })

        return listings

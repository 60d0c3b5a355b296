"""eBay used-item search parsing."""

from typing import Any, Optional
from urllib.parse import urlencode

from app.scrapers.parsing import attr_of, make_soup, text_of

CATEGORY_IDS = {
    "furniture": "3197",
    "apartments": "10542",
    "motorcycles": "6024",
    "autos": "6001",
}

# eBay caps results per page at 200
MAX_PAGE_SIZE = 200

SKIPPED_CARD_CLASSES = ("s-item--watch-at-corner", "s-item--ads")


class EbayStrategy:
    platform = "ebay"
    delay_seconds = 2.0
    location_independent = True

    def __init__(self, config=None):
        self.config = config

    def build_url(self, location: str, category: str) -> Optional[str]:
        page_size = MAX_PAGE_SIZE
        if self.config is not None:
            page_size = min(self.config.max_results_per_search, MAX_PAGE_SIZE)

        params = {
            "_nkw": category,
            "_sacat": CATEGORY_IDS.get(category, "0"),
            "LH_ItemCondition": "3000",  # used
            "_sop": "10",  # newly listed first
            "_ipg": str(page_size),
        }
        return f"https://www.ebay.com/sch/i.html?{urlencode(params)}"

    def request_headers(self) -> dict[str, str]:
        return {}

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        soup = make_soup(html)

        listings = []
        for card in soup.select(".s-item"):
            if len(listings) >= limit:
                break
            classes = card.get("class") or []
            if any(cls in classes for cls in SKIPPED_CARD_CLASSES):
                continue

            title = text_of(card, ".s-item__title")
            if not title or title == "New Listing" or "shop on ebay" in title.lower():
                continue

            link = attr_of(card, ".s-item__link", "href")
            if not link:
                continue

            # Price ranges ("$40.00 to $55.00") keep the low end
            price_text = text_of(card, ".s-item__price")
            condition = text_of(card, ".SECONDARY_INFO")
            shipping = text_of(card, ".s-item__shipping")
            image = attr_of(card, ".s-item__image-img", "src")

            listings.append({
                "title": title,
                "description": ". ".join(part for part in (condition, shipping) if part),
                "category": category,
                "price": price_text.split(" ")[0] if price_text else 0,
                "location": text_of(card, ".s-item__location") or location,
                "url": link.split("?")[0],
                "image_urls": [image] if image and image.startswith("http") else [],
                "metadata": {"condition": condition} if condition else {},
            })

        return listings

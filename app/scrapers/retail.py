"""
Online retailer catalogue parsing (Walmart, IKEA, Wayfair, Overstock).

Retailers sell new items shipped anywhere, so each category is fetched once
and every item carries a fixed "Online (...)" location.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import quote_plus

from app.scrapers.parsing import absolute_url, image_list, make_soup, text_of


@dataclass
class RetailStrategy:
    """Selector-driven strategy shared by the retailer catalogues."""

    platform: str
    host: str
    search_url: Callable[[str], str]
    category_terms: dict[str, Optional[str]]
    card_selector: str
    title_selector: str
    price_selector: str
    location_label: str
    description_template: str = "{retailer} {category}"
    retailer: str = ""
    delay_seconds: float = 2.0
    location_independent: bool = True
    headers: dict[str, str] = field(default_factory=dict)

    def build_url(self, location: str, category: str) -> Optional[str]:
        term = self.category_terms.get(category)
        if not term:
            return None
        return self.search_url(quote_plus(term))

    def request_headers(self) -> dict[str, str]:
        return dict(self.headers)

    def parse(self, html: str, location: str, category: str, limit: int) -> list[dict[str, Any]]:
        soup = make_soup(html)

        listings = []
        for card in soup.select(self.card_selector)[:limit]:
            title = text_of(card, self.title_selector)
            link = card.select_one("a[href]")
            url = absolute_url(link.get("href") if link else None, self.host)
            if not title or not url:
                continue

            listings.append({
                "title": title,
                "description": self.description_template.format(retailer=self.retailer, category=category),
                "category": category,
                "price": text_of(card, self.price_selector),
                "location": self.location_label,
                "url": url,
                "image_urls": image_list(card, "img", self.host),
            })

        return listings


def walmart_strategy(config=None) -> RetailStrategy:
    return RetailStrategy(
        platform="walmart",
        retailer="Walmart",
        host="https://www.walmart.com",
        search_url=lambda term: f"https://www.walmart.com/search?q={term}&sort=price_low",
        category_terms={
            "furniture": "furniture",
            "autos": "auto-parts-accessories",
            "motorcycles": "motorcycle-parts-accessories",
            "apartments": None,
            "other": "all",
        },
        card_selector="[data-item-id]",
        title_selector='[data-automation-id="product-title"]',
        price_selector='[data-automation-id="product-price"]',
        location_label="Online (Walmart)",
    )


def ikea_strategy(config=None) -> RetailStrategy:
    return RetailStrategy(
        platform="ikea",
        retailer="IKEA",
        host="https://www.ikea.com",
        search_url=lambda term: f"https://www.ikea.com/us/en/search/?q={term}",
        category_terms={
            "furniture": "furniture",
            "autos": None,
            "motorcycles": None,
            "apartments": None,
            "other": "all-products",
        },
        card_selector='.plp-product-list__products .plp-fragment-wrapper, [data-testid="plp-product-card"]',
        title_selector='.plp-price-module__product-name, [data-testid="plp-product-card__title"]',
        price_selector='.plp-price__integer, [data-testid="plp-product-card__price"]',
        location_label="Online (IKEA) - Available at multiple stores",
    )


def wayfair_strategy(config=None) -> RetailStrategy:
    return RetailStrategy(
        platform="wayfair",
        retailer="Wayfair",
        host="https://www.wayfair.com",
        search_url=lambda term: (
            f"https://www.wayfair.com/keyword.php?keyword={term}&command=dosearch&new_keyword_search=true"
        ),
        category_terms={
            "furniture": "furniture",
            "autos": None,
            "motorcycles": None,
            "apartments": None,
            "other": "all-products",
        },
        card_selector='[data-enzyme-id="ProductCard"], .ProductCard',
        title_selector='.ProductCard__name, [data-enzyme-id="ProductCardName"]',
        price_selector='.ProductCard__price, [data-enzyme-id="ProductCardPrice"]',
        location_label="Online (Wayfair)",
    )


def overstock_strategy(config=None) -> RetailStrategy:
    return RetailStrategy(
        platform="overstock",
        retailer="Overstock",
        host="https://www.overstock.com",
        search_url=lambda term: f"https://www.overstock.com/search?keywords={term}",
        category_terms={
            "furniture": "furniture",
            "autos": None,
            "motorcycles": None,
            "apartments": None,
            "other": "home-garden",
        },
        card_selector='.product-card, [data-cy="product-card"]',
        title_selector='.product-name, [data-cy="product-name"]',
        price_selector='.product-price, [data-cy="product-price"]',
        location_label="Online (Overstock)",
    )

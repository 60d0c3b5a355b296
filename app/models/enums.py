"""Platform and category vocabularies shared by listings and alerts."""

from enum import Enum


class Platform(str, Enum):
    FACEBOOK = "facebook"
    CRAIGSLIST = "craigslist"
    OFFERUP = "offerup"
    EBAY = "ebay"
    NEXTDOOR = "nextdoor"
    WALMART = "walmart"
    IKEA = "ikea"
    WAYFAIR = "wayfair"
    OVERSTOCK = "overstock"
    LETGO = "letgo"
    OTHER = "other"


class Category(str, Enum):
    FURNITURE = "furniture"
    APARTMENTS = "apartments"
    MOTORCYCLES = "motorcycles"
    AUTOS = "autos"
    OTHER = "other"


# Fixed visiting order for a scrape run
PLATFORM_ORDER = [
    Platform.CRAIGSLIST,
    Platform.OFFERUP,
    Platform.EBAY,
    Platform.NEXTDOOR,
    Platform.WALMART,
    Platform.IKEA,
    Platform.WAYFAIR,
    Platform.OVERSTOCK,
]

DEFAULT_ALERT_PLATFORMS = [Platform.FACEBOOK.value, Platform.CRAIGSLIST.value]
DEFAULT_ALERT_CATEGORIES = [Category.FURNITURE.value]

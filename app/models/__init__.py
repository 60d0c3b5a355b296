"""Database models."""

from app.models.enums import Category, Platform
from app.models.listing import Listing
from app.models.search_alert import SearchAlert

__all__ = [
    "Category",
    "Platform",
    "Listing",
    "SearchAlert",
]

"""Core pipeline services."""

from app.services.alert_matcher import AlertMatcher, matches
from app.services.alert_store import AlertStore
from app.services.listing_store import ListingStore, UpsertResult
from app.services.notifications import NotificationDispatcher
from app.services.orchestrator import ScrapeOrchestrator

__all__ = [
    "AlertMatcher",
    "AlertStore",
    "ListingStore",
    "NotificationDispatcher",
    "ScrapeOrchestrator",
    "UpsertResult",
    "matches",
]

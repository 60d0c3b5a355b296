"""Alert Matching Engine: AND-of-filters / OR-of-keywords evaluation of listings against alerts."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from app.schemas import MultiChannelResult, SampleListing
from app.services.alert_store import AlertStore
from app.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


def matches(listing, alert) -> bool:
    """Return True when ``listing`` satisfies every filter of ``alert``.

    Empty filter lists impose no constraint. Keywords are OR-ed and matched
    case-insensitively as plain substrings of title + description.
    """
    if not alert.is_active:
        return False

    # Deactivated listings stay stored but never alert
    if not getattr(listing, "is_active", True):
        return False

    if alert.categories and listing.category not in alert.categories:
        return False

    if alert.platforms and listing.platform not in alert.platforms:
        return False

    if alert.locations:
        location = (listing.location or "").lower()
        if not any(loc.lower() in location for loc in alert.locations):
            return False

    price = listing.price or 0
    if alert.price_min and alert.price_min > 0 and price < alert.price_min:
        return False
    if alert.price_max is not None and price > alert.price_max:
        return False

    text = f"{listing.title} {listing.description or ''}".lower()
    return any(keyword.lower() in text for keyword in alert.keywords or [])


class AlertMatcher:
    """Evaluates fresh listings against every active alert and dispatches notifications."""

    def __init__(self, alerts: AlertStore, dispatcher: NotificationDispatcher):
        self.alerts = alerts
        self.dispatcher = dispatcher

    async def process_new_listings(self, listings: Iterable, now: Optional[datetime] = None) -> dict:
        """
        Check every listing against every active alert.

        Returns:
            ``processed``: listings evaluated
            ``matched``: (listing, alert) pairs satisfying the predicate
            ``notified``: pairs where at least one channel sent
        """
        listings = list(listings or [])
        if not listings:
            return {"processed": 0, "matched": 0, "notified": 0}

        logger.info(f"Processing {len(listings)} new listings for alert matching...")

        active = self.alerts.active_alerts()
        if not active:
            logger.info("No active search alerts found")
            return {"processed": len(listings), "matched": 0, "notified": 0}

        logger.info(f"Found {len(active)} active search alerts")

        matched = 0
        notified = 0
        for listing in listings:
            for alert in active:
                if not matches(listing, alert):
                    continue

                matched += 1
                logger.info(f"Match found: '{listing.title}' matches alert '{alert.name}'")

                try:
                    results = await self.dispatcher.send_multi_channel(alert, listing)
                except Exception as e:
                    logger.error(f"Failed to send notification for alert '{alert.name}': {e}")
                    continue

                if not results.any_sent:
                    continue

                notified += 1
                logger.info(f"Notifications sent for alert '{alert.name}'")
                try:
                    self.alerts.record_notification(alert, when=now)
                except Exception as e:
                    logger.error(f"Failed to record notification for alert '{alert.name}': {e}")

        logger.info(f"Alert matching complete: {matched} matches, {notified} notifications sent")
        return {"processed": len(listings), "matched": matched, "notified": notified}

    async def test_alert(
        self,
        user_id: str,
        alert_id: int,
        sample: Optional[SampleListing] = None,
    ) -> dict:
        """Run a sample listing through matching + dispatch without a scrape or bookkeeping."""
        alert = self.alerts.get(user_id, alert_id)
        sample = sample or SampleListing()

        if not matches(sample, alert):
            return {"matches": False, "notifications_sent": None}

        results: MultiChannelResult = await self.dispatcher.send_multi_channel(alert, sample)
        return {"matches": True, "notifications_sent": results.model_dump()}

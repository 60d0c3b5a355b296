import asyncio
import json
from datetime import datetime
from types import SimpleNamespace

import httpx
import pytest

from app.api.telegram import TelegramClient
from app.api.whatsapp import WhatsAppClient
from app.errors import NotFoundError
from app.schemas import AlertCreate, ChannelResult, MultiChannelResult, SampleListing
from app.services.alert_matcher import AlertMatcher, matches
from app.services.alert_store import AlertStore
from app.services.listing_store import ListingStore
from app.services.notifications import NotificationDispatcher
from tests.helpers import mock_client, record_requests


def make_alert(**overrides):
    data = {
        "name": "Sofas",
        "is_active": True,
        "keywords": ["sofa"],
        "categories": [],
        "platforms": [],
        "locations": [],
        "price_min": 0,
        "price_max": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def make_listing(**overrides):
    data = {
        "title": "Grey Sofa",
        "description": "",
        "category": "furniture",
        "platform": "craigslist",
        "location": "Brooklyn, New York",
        "price": 250.0,
        "url": "https://x/1",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def test_keywords_are_or_ed():
    alert = make_alert(keywords=["sofa", "chair"])

    assert matches(make_listing(title="Leather Chair for sale"), alert)
    assert not matches(make_listing(title="Dining Table"), alert)


def test_keyword_matches_description_case_insensitively():
    alert = make_alert(keywords=["MID-CENTURY"])

    assert matches(make_listing(title="Armchair", description="Genuine mid-century piece"), alert)


@pytest.mark.parametrize("price,expected", [(100, True), (300, True), (99, False), (301, False)])
def test_price_bounds_are_inclusive(price, expected):
    alert = make_alert(price_min=100, price_max=300)

    assert matches(make_listing(price=price), alert) is expected


def test_zero_price_min_is_not_enforced():
    assert matches(make_listing(price=0), make_alert(price_min=0))


def test_inactive_alert_never_matches():
    assert not matches(make_listing(), make_alert(is_active=False))


def test_deactivated_listing_never_matches():
    assert matches(make_listing(is_active=True), make_alert())
    assert not matches(make_listing(is_active=False), make_alert())


def test_location_filter_is_substring_of_listing_location():
    assert matches(make_listing(), make_alert(locations=["chicago", "new york"]))
    assert not matches(make_listing(), make_alert(locations=["chicago"]))


@pytest.mark.parametrize("field,value", [
    ("categories", ["autos"]),
    ("platforms", ["ebay"]),
    ("locations", ["seattle"]),
])
def test_clearing_a_filter_only_widens_matches(field, value):
    listing = make_listing()
    restricted = make_alert(**{field: value})
    cleared = make_alert(**{field: []})

    assert not matches(listing, restricted)
    assert matches(listing, cleared)


def dispatcher_for(make_settings, handler):
    config = make_settings(
        telegram_bot_token="tok",
        whatsapp_account_sid="AC123",
        whatsapp_auth_token="secret",
        whatsapp_from_number="+15550000000",
    )
    client = mock_client(handler)
    return NotificationDispatcher(
        config,
        telegram=TelegramClient(config, client=client),
        whatsapp=WhatsAppClient(config, client=client),
    )


def ok_responses(request: httpx.Request) -> httpx.Response:
    if "api.telegram.org" in str(request.url):
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})
    return httpx.Response(201, json={"sid": "SM1", "status": "queued"})


def create_alert(db, **overrides):
    data = {
        "user_id": "user-1",
        "name": "Cheap sofas",
        "keywords": ["sofa"],
        "categories": ["furniture"],
        "price_max": 300,
        "notification_channels": {"telegram": {"enabled": True, "chat_id": "123"}},
    }
    data.update(overrides)
    return AlertStore(db).create(AlertCreate(**data))


def test_end_to_end_match_notifies_telegram_and_books_one_match(db, make_settings):
    alert = create_alert(db)
    listing = ListingStore(db).upsert({
        "title": "Grey Sofa",
        "category": "furniture",
        "platform": "craigslist",
        "price": 250,
        "url": "https://x/1",
    }).listing

    handler = record_requests(ok_responses)
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, handler))
    now = datetime(2026, 5, 1, 9, 30)

    summary = asyncio.run(matcher.process_new_listings([listing], now=now))

    assert summary == {"processed": 1, "matched": 1, "notified": 1}
    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request.url.path == "/bottok/sendMessage"
    body = json.loads(request.content)
    assert body["chat_id"] == "123"
    assert "Grey Sofa" in body["text"]
    assert "https://x/1" in body["text"]

    db.refresh(alert)
    assert alert.match_count == 1
    assert alert.last_notified_at == now


def test_both_channels_succeeding_increments_match_count_once(db, make_settings):
    alert = create_alert(db, notification_channels={
        "telegram": {"enabled": True, "chat_id": "123"},
        "whatsapp": {"enabled": True, "phone_number": "+15551234567"},
    })
    listing = make_listing()

    handler = record_requests(ok_responses)
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, handler))

    summary = asyncio.run(matcher.process_new_listings([listing]))

    assert summary["notified"] == 1
    assert len(handler.requests) == 2
    db.refresh(alert)
    assert alert.match_count == 1


def test_failed_sends_count_as_matched_but_not_notified(db, make_settings):
    alert = create_alert(db)

    def failing(request):
        return httpx.Response(500, text="boom")

    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, failing))

    summary = asyncio.run(matcher.process_new_listings([make_listing()]))

    assert summary == {"processed": 1, "matched": 1, "notified": 0}
    db.refresh(alert)
    assert alert.match_count == 0
    assert alert.last_notified_at is None


class ExplodingThenOkDispatcher:
    def __init__(self):
        self.calls = 0

    async def send_multi_channel(self, alert, listing):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("provider exploded")
        return MultiChannelResult(telegram=ChannelResult(sent=True))


def test_dispatch_failure_does_not_stop_remaining_pairs(db):
    first = create_alert(db, name="First")
    second = create_alert(db, name="Second")
    dispatcher = ExplodingThenOkDispatcher()

    summary = asyncio.run(AlertMatcher(AlertStore(db), dispatcher).process_new_listings([make_listing()]))

    assert dispatcher.calls == 2
    assert summary == {"processed": 1, "matched": 2, "notified": 1}
    db.refresh(first)
    db.refresh(second)
    assert (first.match_count, second.match_count) == (0, 1)


class FlakyBookkeepingStore(AlertStore):
    def __init__(self, db):
        super().__init__(db)
        self.recorded = []

    def record_notification(self, alert, when=None):
        if not self.recorded:
            self.recorded.append(None)
            raise RuntimeError("database is locked")
        self.recorded.append(alert.name)
        return super().record_notification(alert, when=when)


def test_bookkeeping_failure_does_not_stop_remaining_pairs(db, make_settings):
    first = create_alert(db, name="First")
    second = create_alert(db, name="Second")
    handler = record_requests(ok_responses)
    store = FlakyBookkeepingStore(db)

    summary = asyncio.run(
        AlertMatcher(store, dispatcher_for(make_settings, handler)).process_new_listings([make_listing()])
    )

    assert len(handler.requests) == 2
    assert summary == {"processed": 1, "matched": 2, "notified": 2}
    assert store.recorded == [None, "Second"]
    db.refresh(first)
    db.refresh(second)
    assert (first.match_count, second.match_count) == (0, 1)


def test_inactive_alerts_are_not_evaluated(db, make_settings):
    create_alert(db, is_active=False)
    handler = record_requests(ok_responses)
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, handler))

    summary = asyncio.run(matcher.process_new_listings([make_listing()]))

    assert summary == {"processed": 1, "matched": 0, "notified": 0}
    assert handler.requests == []


def test_test_alert_uses_default_sample_without_bookkeeping(db, make_settings):
    alert = create_alert(db, keywords=["furniture"], price_max=None)
    handler = record_requests(ok_responses)
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, handler))

    result = asyncio.run(matcher.test_alert("user-1", alert.id))

    assert result["matches"] is True
    assert result["notifications_sent"]["telegram"] == {"sent": True, "error": None}
    assert result["notifications_sent"]["whatsapp"]["sent"] is False
    db.refresh(alert)
    assert alert.match_count == 0
    assert alert.last_notified_at is None


def test_test_alert_reports_non_match(db, make_settings):
    alert = create_alert(db, keywords=["motorcycle"])
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, record_requests(ok_responses)))

    result = asyncio.run(matcher.test_alert("user-1", alert.id, SampleListing(title="Grey Sofa")))

    assert result == {"matches": False, "notifications_sent": None}


def test_test_alert_for_another_users_alert_is_not_found(db, make_settings):
    alert = create_alert(db)
    matcher = AlertMatcher(AlertStore(db), dispatcher_for(make_settings, record_requests(ok_responses)))

    with pytest.raises(NotFoundError):
        asyncio.run(matcher.test_alert("someone-else", alert.id))

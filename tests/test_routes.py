from datetime import datetime

from app.scrapers import ScrapeReport
from app.scrapers.base import ItemResult
from app.services.listing_store import ListingStore


def create(client, **overrides):
    payload = {"user_id": "user-1", "name": "Sofas", "keywords": ["sofa"]}
    payload.update(overrides)
    return client.post("/api/alerts", json=payload)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_alert_applies_defaults(client):
    response = create(client)

    assert response.status_code == 201
    alert = response.json()["alert"]
    assert alert["keywords"] == ["sofa"]
    assert alert["categories"] == ["furniture"]
    assert alert["platforms"] == ["facebook", "craigslist"]
    assert alert["price_min"] == 0.0
    assert alert["price_max"] is None
    assert alert["match_count"] == 0
    assert alert["notification_channels"]["telegram"] == {"enabled": False, "chat_id": None}


def test_create_alert_rejects_empty_keywords(client):
    assert create(client, keywords=[]).status_code == 422
    assert create(client, keywords=["  "]).status_code == 422


def test_create_alert_rejects_inverted_price_range(client):
    assert create(client, price_min=500, price_max=100).status_code == 422


def test_alerts_are_scoped_to_their_user(client):
    alert_id = create(client).json()["alert"]["id"]
    create(client, user_id="user-2", name="Bikes", keywords=["honda"])

    listed = client.get("/api/alerts/user-1").json()["alerts"]
    assert [a["name"] for a in listed] == ["Sofas"]

    assert client.get(f"/api/alerts/user-1/{alert_id}").status_code == 200
    missing = client.get(f"/api/alerts/user-2/{alert_id}")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Alert not found"}


def test_update_and_delete_alert(client):
    alert_id = create(client, price_max=300).json()["alert"]["id"]

    response = client.put(
        f"/api/alerts/user-1/{alert_id}",
        json={"keywords": ["couch"], "price_max": None, "notification_channels": {
            "telegram": {"enabled": True, "chat_id": "42"},
        }},
    )

    assert response.status_code == 200
    alert = response.json()["alert"]
    assert alert["keywords"] == ["couch"]
    assert alert["price_max"] is None
    assert alert["name"] == "Sofas"
    assert alert["notification_channels"]["telegram"] == {"enabled": True, "chat_id": "42"}

    assert client.delete(f"/api/alerts/user-1/{alert_id}").json() == {
        "success": True,
        "message": "Alert deleted",
    }
    assert client.get(f"/api/alerts/user-1/{alert_id}").status_code == 404
    assert client.delete(f"/api/alerts/user-1/{alert_id}").status_code == 404


def test_update_rejects_range_inverted_against_stored_bound(client):
    alert_id = create(client, price_max=300).json()["alert"]["id"]

    response = client.put(f"/api/alerts/user-1/{alert_id}", json={"price_min": 500})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "price_max must be >= price_min"}
    alert = client.get(f"/api/alerts/user-1/{alert_id}").json()["alert"]
    assert (alert["price_min"], alert["price_max"]) == (0.0, 300.0)

    # Clearing the upper bound in the same request makes the new floor valid
    response = client.put(f"/api/alerts/user-1/{alert_id}", json={"price_min": 500, "price_max": None})
    assert response.status_code == 200
    assert response.json()["alert"]["price_min"] == 500.0


def test_alert_test_endpoint_uses_default_sample(client):
    alert_id = create(client, keywords=["furniture"]).json()["alert"]["id"]

    response = client.post(f"/api/alerts/user-1/{alert_id}/test")

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["matches"] is True
    assert result["notifications_sent"]["telegram"] == {"sent": False, "error": "Telegram channel disabled"}
    assert client.get(f"/api/alerts/user-1/{alert_id}").json()["alert"]["match_count"] == 0


def test_alert_test_endpoint_with_custom_listing(client):
    alert_id = create(client).json()["alert"]["id"]

    response = client.post(
        f"/api/alerts/user-1/{alert_id}/test",
        json={"listing": {"title": "Dining Table", "price": 50}},
    )

    assert response.json()["result"] == {"matches": False, "notifications_sent": None}


def seed_listings(db):
    store = ListingStore(db)
    now = datetime.utcnow()
    store.upsert({"title": "Grey Sofa", "url": "https://x/1", "platform": "craigslist",
                  "category": "furniture", "price": 250, "location": "Queens"}, now=now)
    store.upsert({"title": "Leather Sofa", "url": "https://x/2", "platform": "ebay",
                  "category": "furniture", "price": 900, "metadata": {"condition": "Used"}}, now=now)
    store.upsert({"title": "Honda CB500", "url": "https://x/3", "platform": "craigslist",
                  "category": "motorcycles", "price": 3500}, now=now)


def test_listing_search(client, db):
    seed_listings(db)

    response = client.get("/api/listings/search", params={"search": "sofa", "maxPrice": 300})

    body = response.json()
    assert body["success"] is True
    assert body["pagination"] == {"total": 1, "limit": 50, "skip": 0, "has_more": False}
    assert body["data"][0]["title"] == "Grey Sofa"
    assert body["data"][0]["platform"] == "craigslist"

    sorted_titles = [
        item["title"]
        for item in client.get(
            "/api/listings/search", params={"sortBy": "price", "sortOrder": "desc"}
        ).json()["data"]
    ]
    assert sorted_titles == ["Honda CB500", "Leather Sofa", "Grey Sofa"]

    leather = client.get("/api/listings/search", params={"platform": "ebay"}).json()["data"][0]
    assert leather["metadata"] == {"condition": "Used"}


def test_listing_search_rejects_unknown_sort_key(client):
    assert client.get("/api/listings/search", params={"sortBy": "url"}).status_code == 422


def test_categories_and_stats(client, db):
    seed_listings(db)

    categories = client.get("/api/listings/categories").json()
    assert categories["categories"][0] == {"name": "furniture", "count": 2, "avg_price": 575}
    assert {"name": "craigslist", "count": 2} in categories["platforms"]

    stats = client.get("/api/listings/stats").json()["stats"]
    assert stats["total_listings"] == 3
    assert stats["recent_listings"] == 3
    assert stats["last_scraped_at"] is not None


class StubAdapter:
    def __init__(self, platform, count=0, error=None):
        self.platform = platform
        self.count = count
        self.error = error

    async def scrape(self, locations, categories):
        if self.error:
            raise self.error
        return ScrapeReport(platform=self.platform, items=[ItemResult(status="ok")] * self.count)


def test_scrape_trigger_reports_partial_failures_with_200(client, monkeypatch):
    adapters = [StubAdapter("craigslist", count=2), StubAdapter("ebay", error=RuntimeError("blocked"))]
    monkeypatch.setattr(
        "app.services.orchestrator.build_adapters",
        lambda config, fetcher, store: adapters,
    )

    response = client.post("/api/scrape/trigger")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Scraping completed"
    assert body["total"] == 2
    assert body["results"]["craigslist"]["count"] == 2
    assert body["results"]["ebay"] == {"success": False, "count": 0, "skipped": 0, "error": "blocked"}

"""Listing query routes and the manual scrape trigger."""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.fetcher import ResilientFetcher
from app.config import settings
from app.database import get_db
from app.schemas import ListingOut
from app.services.listing_store import ListingStore
from app.services.orchestrator import ScrapeOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/listings/search")
async def search_listings(
    db: Session = Depends(get_db),
    category: Optional[str] = None,
    platform: Optional[str] = None,
    location: Optional[str] = None,
    min_price: Optional[float] = Query(default=None, alias="minPrice"),
    max_price: Optional[float] = Query(default=None, alias="maxPrice"),
    search: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    skip: int = Query(default=0, ge=0),
    sort_by: Literal["scraped_at", "price", "posted_at", "title"] = Query(default="scraped_at", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
):
    """
    Search active listings.

    Args:
        location: case-insensitive substring of the listing location
        search: case-insensitive substring of title or description
        sortBy: 'scraped_at', 'price', 'posted_at' or 'title'
    """
    page = ListingStore(db).search(
        category=category,
        platform=platform,
        location=location,
        min_price=min_price,
        max_price=max_price,
        search=search,
        limit=limit,
        skip=skip,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    return {
        "success": True,
        "data": [ListingOut.model_validate(item).model_dump(mode="json") for item in page["items"]],
        "pagination": {
            "total": page["total"],
            "limit": page["limit"],
            "skip": page["skip"],
            "has_more": page["has_more"],
        },
    }


@router.get("/listings/categories")
async def get_categories(db: Session = Depends(get_db)):
    """Category counts with average price, and platform counts."""
    return {"success": True, **ListingStore(db).summary()}


@router.get("/listings/stats")
async def get_stats(db: Session = Depends(get_db)):
    stats = ListingStore(db).stats()
    last = stats["last_scraped_at"]
    return {
        "success": True,
        "stats": {**stats, "last_scraped_at": last.isoformat() if last else None},
    }


@router.post("/scrape/trigger")
async def trigger_scrape(db: Session = Depends(get_db)):
    """Run every enabled platform now. Always 200; failures are reported per platform."""
    logger.info("Manual scrape triggered")

    async with ResilientFetcher(settings) as fetcher:
        orchestrator = ScrapeOrchestrator.from_session(settings, db, fetcher)
        outcome = await orchestrator.run_all()

    return {
        "success": True,
        "message": "Scraping completed",
        "results": outcome["results"],
        "total": outcome["total"],
        "alerts": outcome["alerts"],
    }

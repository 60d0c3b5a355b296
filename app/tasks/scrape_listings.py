"""Scheduled scrape run: every enabled platform, then alert matching on new listings."""

import asyncio
import logging

from app.tasks.celery_app import celery_app
from app.config import settings
from app.database import SessionLocal
from app.api.fetcher import ResilientFetcher
from app.services.orchestrator import ScrapeOrchestrator

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async code in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def run_scrape(db) -> dict:
    async with ResilientFetcher(settings) as fetcher:
        orchestrator = ScrapeOrchestrator.from_session(settings, db, fetcher)
        return await orchestrator.run_all()


@celery_app.task(bind=True)
def scrape_all_platforms(self):
    """
    Run all enabled platform scrapers once.

    Per-platform failures are reported in the result map, never raised, so
    the task itself is not retried.
    """
    logger.info("Starting scheduled scrape run")

    db = SessionLocal()
    try:
        outcome = run_async(run_scrape(db))
    finally:
        db.close()

    for platform, result in outcome["results"].items():
        if result["success"]:
            logger.info(f"{platform}: {result['count']} listings")
        else:
            logger.error(f"{platform}: failed ({result['error']})")

    logger.info(f"Scheduled scrape complete: {outcome['total']} listings")
    return outcome

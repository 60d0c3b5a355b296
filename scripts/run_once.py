"""
Run every enabled platform scraper once from the shell.

Usage:
    python -m scripts.run_once

Prints the per-platform outcome and the total, then exits non-zero when
every platform failed.
"""

import asyncio
import logging
import sys

from app.config import settings
from app.database import SessionLocal
from app.tasks.scrape_listings import run_scrape

logger = logging.getLogger(__name__)


async def main() -> int:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = SessionLocal()
    try:
        outcome = await run_scrape(db)
    finally:
        db.close()

    results = outcome["results"]
    print("\nScrape results:")
    for platform, result in results.items():
        if result["success"]:
            print(f"  {platform}: {result['count']} listings ({result['skipped']} skipped)")
        else:
            print(f"  {platform}: FAILED - {result['error']}")
    print(f"\nTotal: {outcome['total']} listings")

    alerts = outcome.get("alerts") or {}
    print(f"Alerts: {alerts.get('matched', 0)} matches, {alerts.get('notified', 0)} notified")

    if results and not any(r["success"] for r in results.values()):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

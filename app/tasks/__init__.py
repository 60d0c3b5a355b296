"""Celery tasks."""

from app.tasks.celery_app import celery_app
from app.tasks.scrape_listings import scrape_all_platforms

__all__ = [
    "celery_app",
    "scrape_all_platforms",
]

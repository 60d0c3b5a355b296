"""Celery application configuration."""

import logging
import ssl

from celery import Celery
from celery.schedules import crontab

from app.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

redis_url = settings.redis_url

# Managed Redis over TLS (rediss://) presents self-signed certs
redis_ssl = {"ssl_cert_reqs": ssl.CERT_NONE} if redis_url.startswith("rediss://") else None

celery_app = Celery(
    "listingaggregator",
    broker=redis_url,
    backend=redis_url,
    include=["app.tasks.scrape_listings"],
)

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
    "task_track_started": True,
    "task_time_limit": 3600,  # a full run visits every platform sequentially
    "worker_prefetch_multiplier": 1,
    "worker_concurrency": 1,
}

if redis_ssl:
    celery_config["broker_use_ssl"] = redis_ssl
    celery_config["redis_backend_use_ssl"] = redis_ssl

celery_app.conf.update(**celery_config)

# Beat schedule - default 06:00, 12:00 and 18:00 UTC
celery_app.conf.beat_schedule = {}
if settings.scheduler_enabled:
    celery_app.conf.beat_schedule = {
        "scrape-all-platforms": {
            "task": "app.tasks.scrape_listings.scrape_all_platforms",
            "schedule": crontab(minute=settings.scrape_cron_minute, hour=settings.scrape_cron_hours),
        },
    }

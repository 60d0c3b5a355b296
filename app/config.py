"""Application configuration settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "postgresql://localhost:5432/listingaggregator"

    # Redis (Celery broker/backend)
    redis_url: str = "redis://localhost:6379/0"

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Scrape matrix (comma-separated)
    search_locations: str = "newyork"
    search_categories: str = "furniture,apartments,motorcycles,autos"
    max_results_per_search: int = 50

    # Per-request timeouts (seconds)
    scrape_timeout_seconds: float = 30.0
    relay_timeout_seconds: float = 30.0

    # Platform toggles (all on by default)
    enable_craigslist: bool = True
    enable_offerup: bool = True
    enable_ebay: bool = True
    enable_nextdoor: bool = True
    enable_walmart: bool = True
    enable_ikea: bool = True
    enable_wayfair: bool = True
    enable_overstock: bool = True

    # Inter-request pacing between calls to the same platform
    pacing_enabled: bool = True

    # Anti-bot bypass relay (ScraperAPI)
    scraper_api_key: str = ""
    scraper_api_url: str = "http://api.scraperapi.com"
    scraper_api_render: bool = False
    scraper_api_country: str = "us"

    # Telegram bot
    telegram_bot_token: str = ""
    telegram_api_url: str = "https://api.telegram.org"

    # WhatsApp via Twilio
    whatsapp_api_url: str = "https://api.twilio.com"
    whatsapp_account_sid: str = ""
    whatsapp_auth_token: str = ""
    whatsapp_from_number: str = ""

    # Authenticated sessions (JSON array of {"name": ..., "value": ...})
    offerup_cookies: str = ""
    nextdoor_cookies: str = ""

    # Celery beat schedule (crontab hours/minute, UTC)
    scheduler_enabled: bool = True
    scrape_cron_hours: str = "6,12,18"
    scrape_cron_minute: str = "0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def locations(self) -> list[str]:
        return _split_csv(self.search_locations)

    @property
    def categories(self) -> list[str]:
        return [c.lower() for c in _split_csv(self.search_categories)]

    def platform_enabled(self, platform: str) -> bool:
        """Platforms without an explicit toggle are treated as enabled."""
        return bool(getattr(self, f"enable_{platform}", True))


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

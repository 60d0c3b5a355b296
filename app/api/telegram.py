"""Telegram Bot API client for alert messages."""

import logging
from typing import Optional

import httpx

from app.config import Settings
from app.errors import ConfigurationError, NetworkError

logger = logging.getLogger(__name__)


class TelegramClient:
    """Sends one text message per call to a chat via ``sendMessage``."""

    def __init__(self, config: Settings, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.config.telegram_bot_token)

    async def send_message(self, chat_id: str, text: str) -> dict:
        """
        Send a Markdown message.

        Raises:
            ConfigurationError: no bot token configured
            NetworkError: the API call failed or Telegram answered ``ok: false``
        """
        if not self.configured:
            raise ConfigurationError("No bot token")

        url = f"{self.config.telegram_api_url.rstrip('/')}/bot{self.config.telegram_bot_token}/sendMessage"
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": False,
        }

        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, timeout=30.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=payload, timeout=30.0)
        except httpx.HTTPError as e:
            raise NetworkError(f"Telegram send failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Telegram API error: {response.status_code} - {response.text}")
            raise NetworkError(
                f"Telegram send failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        data = response.json()
        if not data.get("ok", False):
            raise NetworkError(f"Telegram send failed: {data.get('description', 'unknown error')}")

        logger.info(f"Telegram notification sent to {chat_id}")
        return data

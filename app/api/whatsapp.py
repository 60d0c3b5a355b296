"""WhatsApp messaging through the Twilio Messages API."""

import logging
from typing import Optional

import httpx

from app.config import Settings
from app.errors import ConfigurationError, NetworkError

logger = logging.getLogger(__name__)


class WhatsAppClient:
    """Posts one WhatsApp message per call, authenticated with the account SID/token pair."""

    def __init__(self, config: Settings, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(
            self.config.whatsapp_api_url
            and self.config.whatsapp_account_sid
            and self.config.whatsapp_auth_token
            and self.config.whatsapp_from_number
        )

    async def send_message(self, phone_number: str, body: str) -> dict:
        if not self.configured:
            raise ConfigurationError("WhatsApp not configured")

        sid = self.config.whatsapp_account_sid
        url = f"{self.config.whatsapp_api_url.rstrip('/')}/2010-04-01/Accounts/{sid}/Messages.json"
        data = {
            "From": f"whatsapp:{self.config.whatsapp_from_number}",
            "To": f"whatsapp:{phone_number}",
            "Body": body,
        }
        auth = (sid, self.config.whatsapp_auth_token)

        try:
            if self._client is not None:
                response = await self._client.post(url, data=data, auth=auth, timeout=30.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, data=data, auth=auth, timeout=30.0)
        except httpx.HTTPError as e:
            raise NetworkError(f"WhatsApp send failed: {e}") from e

        if response.is_error:
            logger.error(f"Twilio API error: {response.status_code} - {response.text}")
            raise NetworkError(
                f"WhatsApp send failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"WhatsApp notification sent to {phone_number}")
        return response.json()

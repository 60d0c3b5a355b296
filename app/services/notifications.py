"""Notification Dispatcher: one attempt per enabled channel, no retry."""

import logging
from typing import Any

from app.api.telegram import TelegramClient
from app.api.whatsapp import WhatsAppClient
from app.config import Settings
from app.errors import AggregatorError
from app.schemas import ChannelResult, MultiChannelResult

logger = logging.getLogger(__name__)


def _format_price(price: Any) -> str:
    try:
        value = float(price or 0)
    except (TypeError, ValueError):
        return str(price)
    return f"{value:,.0f}" if value.is_integer() else f"{value:,.2f}"


def format_telegram_message(alert, listing) -> str:
    return (
        "🔔 *New Listing Alert*\n\n"
        f'Your search alert "{alert.name}" has a new match!\n\n'
        f"*{listing.title}*\n"
        f"💰 Price: ${_format_price(listing.price)}\n"
        f"📍 Location: {listing.location}\n"
        f"🏷️ Platform: {listing.platform}\n"
        f"🔗 [View Listing]({listing.url})"
    )


def format_whatsapp_message(alert, listing) -> str:
    return (
        "🔔 New Listing Alert\n\n"
        f'Your search alert "{alert.name}" has a new match!\n\n'
        f"{listing.title}\n"
        f"💰 Price: ${_format_price(listing.price)}\n"
        f"📍 Location: {listing.location}\n"
        f"🏷️ Platform: {listing.platform}\n"
        f"🔗 {listing.url}"
    )


class NotificationDispatcher:
    """Sends a formatted match message through each channel enabled on an alert."""

    def __init__(
        self,
        config: Settings,
        telegram: TelegramClient | None = None,
        whatsapp: WhatsAppClient | None = None,
    ):
        self.config = config
        self.telegram = telegram or TelegramClient(config)
        self.whatsapp = whatsapp or WhatsAppClient(config)

    async def send_multi_channel(self, alert, listing) -> MultiChannelResult:
        """
        Attempt each channel independently.

        A channel that is disabled, has no address, or has no provider
        credential yields ``sent=False`` with a reason and makes no network call.
        """
        return MultiChannelResult(
            telegram=await self._send_telegram(alert, listing),
            whatsapp=await self._send_whatsapp(alert, listing),
        )

    async def _send_telegram(self, alert, listing) -> ChannelResult:
        if not alert.telegram_enabled:
            return ChannelResult(sent=False, error="Telegram channel disabled")
        if not alert.telegram_chat_id:
            return ChannelResult(sent=False, error="No Telegram chat id")
        if not self.telegram.configured:
            logger.warning("Telegram bot token not configured")
            return ChannelResult(sent=False, error="No bot token")

        try:
            await self.telegram.send_message(alert.telegram_chat_id, format_telegram_message(alert, listing))
        except AggregatorError as e:
            logger.error(f"Telegram send error for alert '{alert.name}': {e}")
            return ChannelResult(sent=False, error=str(e))
        return ChannelResult(sent=True)

    async def _send_whatsapp(self, alert, listing) -> ChannelResult:
        if not alert.whatsapp_enabled:
            return ChannelResult(sent=False, error="WhatsApp channel disabled")
        if not alert.whatsapp_phone_number:
            return ChannelResult(sent=False, error="No WhatsApp phone number")
        if not self.whatsapp.configured:
            logger.warning("WhatsApp API not configured")
            return ChannelResult(sent=False, error="WhatsApp not configured")

        try:
            await self.whatsapp.send_message(alert.whatsapp_phone_number, format_whatsapp_message(alert, listing))
        except AggregatorError as e:
            logger.error(f"WhatsApp send error for alert '{alert.name}': {e}")
            return ChannelResult(sent=False, error=str(e))
        return ChannelResult(sent=True)

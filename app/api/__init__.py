"""Outbound HTTP clients."""

from app.api.fetcher import ResilientFetcher
from app.api.telegram import TelegramClient
from app.api.whatsapp import WhatsAppClient

__all__ = [
    "ResilientFetcher",
    "TelegramClient",
    "WhatsAppClient",
]

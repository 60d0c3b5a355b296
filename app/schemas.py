"""Pydantic schemas: listing normalization, alert payloads and notification results."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from app.models.enums import (
    DEFAULT_ALERT_CATEGORIES,
    DEFAULT_ALERT_PLATFORMS,
    Category,
    Platform,
)

_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_price(value: Any) -> float:
    """Coerce scraped price text ("$1,250", "$40.00 to $55.00", 40) to a float.

    Missing or unparseable prices fall back to 0.
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _PRICE_RE.search(str(value))
    if not match:
        return 0.0
    return float(match.group(0).replace(",", ""))


def _coerce_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().lower())
    except ValueError:
        return enum_cls.OTHER


class ContactInfo(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class Coordinates(BaseModel):
    lat: float
    lng: float


class ListingCandidate(BaseModel):
    """Canonical shape every Source Adapter candidate is coerced into before persistence."""

    title: str
    description: str = ""
    platform: Platform = Platform.OTHER
    category: Category = Category.OTHER
    price: float = 0.0
    currency: str = "USD"
    location: str = ""
    coordinates: Optional[Coordinates] = None
    url: str
    image_urls: list[str] = Field(default_factory=list)
    contact_info: Optional[ContactInfo] = None
    posted_at: Optional[datetime] = None
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, v):
        title = " ".join(str(v or "").split())
        if not title:
            raise ValueError("title is required")
        return title[:500]

    @field_validator("url", mode="before")
    @classmethod
    def _url_absolute(cls, v):
        url = str(v or "").strip()
        if not url:
            raise ValueError("url is required")
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"url must be absolute: {url}")
        return url

    @field_validator("description", mode="before")
    @classmethod
    def _text_or_empty(cls, v):
        return str(v).strip() if v is not None else ""

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v):
        return " ".join(str(v or "").split())[:255]

    @field_validator("platform", mode="before")
    @classmethod
    def _platform(cls, v):
        return _coerce_enum(Platform, v)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v):
        return _coerce_enum(Category, v)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v):
        price = parse_price(v)
        if price < 0:
            raise ValueError("price must be non-negative")
        return price

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, v):
        return (str(v).strip().upper()[:10] if v else "") or "USD"

    @field_validator("image_urls", mode="before")
    @classmethod
    def _image_urls(cls, v):
        if not v:
            return []
        if isinstance(v, str):
            v = [v]
        return [u for u in (str(x).strip() for x in v) if u.startswith(("http://", "https://"))]

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v):
        return dict(v) if v else {}


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    platform: str
    category: str
    price: float
    currency: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    url: str
    image_urls: list[str] = Field(default_factory=list)
    contact_info: Optional[dict[str, Any]] = None
    posted_at: Optional[datetime] = None
    scraped_at: datetime
    is_active: bool
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("extra", "metadata")
    )


class SampleListing(BaseModel):
    """Listing used by the alert "test" operation; never persisted."""

    title: str = "Test Furniture Item"
    description: str = "Sample listing for testing"
    platform: str = Platform.CRAIGSLIST.value
    category: str = Category.FURNITURE.value
    price: float = 100.0
    location: str = "New York"
    url: str = "https://example.com"


class TelegramChannel(BaseModel):
    enabled: bool = False
    chat_id: Optional[str] = None


class WhatsAppChannel(BaseModel):
    enabled: bool = False
    phone_number: Optional[str] = None


class NotificationChannels(BaseModel):
    telegram: TelegramChannel = Field(default_factory=TelegramChannel)
    whatsapp: WhatsAppChannel = Field(default_factory=WhatsAppChannel)


def _clean_keywords(values: list[str]) -> list[str]:
    keywords = [k.strip() for k in values if k and k.strip()]
    if not keywords:
        raise ValueError("at least one keyword is required")
    return keywords


class AlertCreate(BaseModel):
    user_id: str = Field(min_length=1)
    name: str = "My Alert"
    keywords: list[str]
    categories: list[Category] = Field(default_factory=lambda: [Category(c) for c in DEFAULT_ALERT_CATEGORIES])
    locations: list[str] = Field(default_factory=list)
    platforms: list[Platform] = Field(default_factory=lambda: [Platform(p) for p in DEFAULT_ALERT_PLATFORMS])
    price_min: float = Field(default=0.0, ge=0.0)
    price_max: Optional[float] = Field(default=None, ge=0.0)
    notification_channels: NotificationChannels = Field(default_factory=NotificationChannels)
    is_active: bool = True

    @field_validator("keywords")
    @classmethod
    def _keywords(cls, v):
        return _clean_keywords(v)

    @model_validator(mode="after")
    def _price_range(self):
        if self.price_max is not None and self.price_max < self.price_min:
            raise ValueError("price_max must be >= price_min")
        return self


class AlertUpdate(BaseModel):
    name: Optional[str] = None
    keywords: Optional[list[str]] = None
    categories: Optional[list[Category]] = None
    locations: Optional[list[str]] = None
    platforms: Optional[list[Platform]] = None
    price_min: Optional[float] = Field(default=None, ge=0.0)
    price_max: Optional[float] = Field(default=None, ge=0.0)
    notification_channels: Optional[NotificationChannels] = None
    is_active: Optional[bool] = None

    @field_validator("keywords")
    @classmethod
    def _keywords(cls, v):
        return None if v is None else _clean_keywords(v)


class AlertOut(BaseModel):
    id: int
    user_id: str
    name: str
    keywords: list[str]
    categories: list[str]
    locations: list[str]
    platforms: list[str]
    price_min: float
    price_max: Optional[float]
    notification_channels: NotificationChannels
    is_active: bool
    last_notified_at: Optional[datetime]
    match_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, alert) -> "AlertOut":
        return cls(
            id=alert.id,
            user_id=alert.user_id,
            name=alert.name,
            keywords=list(alert.keywords or []),
            categories=list(alert.categories or []),
            locations=list(alert.locations or []),
            platforms=list(alert.platforms or []),
            price_min=alert.price_min or 0.0,
            price_max=alert.price_max,
            notification_channels=NotificationChannels(
                telegram=TelegramChannel(enabled=alert.telegram_enabled, chat_id=alert.telegram_chat_id),
                whatsapp=WhatsAppChannel(enabled=alert.whatsapp_enabled, phone_number=alert.whatsapp_phone_number),
            ),
            is_active=alert.is_active,
            last_notified_at=alert.last_notified_at,
            match_count=alert.match_count or 0,
            created_at=alert.created_at,
            updated_at=alert.updated_at,
        )


class ChannelResult(BaseModel):
    sent: bool = False
    error: Optional[str] = None


class MultiChannelResult(BaseModel):
    telegram: ChannelResult = Field(default_factory=ChannelResult)
    whatsapp: ChannelResult = Field(default_factory=ChannelResult)

    @property
    def any_sent(self) -> bool:
        return self.telegram.sent or self.whatsapp.sent


class AlertTestRequest(BaseModel):
    listing: Optional[SampleListing] = None

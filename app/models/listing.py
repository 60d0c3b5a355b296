"""Canonical marketplace listing model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Listing(Base):
    """One observed marketplace item, identified by its source URL."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listings_platform_category_active", "platform", "category", "is_active", "scraped_at"),
        Index("ix_listings_category_price_active", "category", "price", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Identity (dedup key)
    url: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    # Listing details
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    platform: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False, index=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    image_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    contact_info: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    extra: Mapped[dict] = mapped_column("metadata", JSON, default=dict, nullable=False)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    scraped_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, platform='{self.platform}', url='{self.url}', price={self.price})>"

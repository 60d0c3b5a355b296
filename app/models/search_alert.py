"""Search alert model: a user's standing interest plus delivery bookkeeping."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.enums import DEFAULT_ALERT_CATEGORIES, DEFAULT_ALERT_PLATFORMS


class SearchAlert(Base):
    """User-defined filter + keyword set + notification preferences."""

    __tablename__ = "search_alerts"
    __table_args__ = (
        Index("ix_search_alerts_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), default="My Alert", nullable=False)

    # Filters (empty list = no constraint, keywords excepted)
    keywords: Mapped[list] = mapped_column(JSON, nullable=False)
    categories: Mapped[list] = mapped_column(JSON, default=lambda: list(DEFAULT_ALERT_CATEGORIES), nullable=False)
    locations: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    platforms: Mapped[list] = mapped_column(JSON, default=lambda: list(DEFAULT_ALERT_PLATFORMS), nullable=False)
    price_min: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    price_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Notification channels
    telegram_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    telegram_chat_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    whatsapp_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    whatsapp_phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Status / bookkeeping
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    match_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<SearchAlert(id={self.id}, user='{self.user_id}', name='{self.name}', matches={self.match_count})>"

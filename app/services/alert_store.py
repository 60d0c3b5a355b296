"""Alert Store: search alert CRUD scoped to the owning user, plus delivery bookkeeping."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models import SearchAlert
from app.schemas import AlertCreate, AlertUpdate, NotificationChannels

logger = logging.getLogger(__name__)


def _values(items) -> list[str]:
    return [getattr(item, "value", item) for item in items]


def _channel_columns(channels: NotificationChannels) -> dict:
    return {
        "telegram_enabled": channels.telegram.enabled,
        "telegram_chat_id": channels.telegram.chat_id,
        "whatsapp_enabled": channels.whatsapp.enabled,
        "whatsapp_phone_number": channels.whatsapp.phone_number,
    }


class AlertStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: AlertCreate) -> SearchAlert:
        alert = SearchAlert(
            user_id=data.user_id,
            name=data.name,
            keywords=list(data.keywords),
            categories=_values(data.categories),
            locations=list(data.locations),
            platforms=_values(data.platforms),
            price_min=data.price_min,
            price_max=data.price_max,
            is_active=data.is_active,
            match_count=0,
            **_channel_columns(data.notification_channels),
        )
        self.db.add(alert)
        self.db.commit()
        self.db.refresh(alert)
        logger.info(f"Created alert {alert.id} '{alert.name}' for user {alert.user_id}")
        return alert

    def list_for_user(self, user_id: str) -> list[SearchAlert]:
        return (
            self.db.query(SearchAlert)
            .filter(SearchAlert.user_id == user_id)
            .order_by(SearchAlert.created_at.desc(), SearchAlert.id.desc())
            .all()
        )

    def get(self, user_id: str, alert_id: int) -> SearchAlert:
        alert = (
            self.db.query(SearchAlert)
            .filter(SearchAlert.id == alert_id)
            .filter(SearchAlert.user_id == user_id)
            .first()
        )
        if not alert:
            raise NotFoundError("Alert not found")
        return alert

    def update(self, user_id: str, alert_id: int, changes: AlertUpdate) -> SearchAlert:
        alert = self.get(user_id, alert_id)
        fields = changes.model_dump(exclude_unset=True)

        # The range check has to see the stored bound the request left out
        price_min = fields.get("price_min")
        if price_min is None:
            price_min = alert.price_min or 0.0
        price_max = fields["price_max"] if "price_max" in fields else alert.price_max
        if price_max is not None and price_max < price_min:
            raise ValidationError("price_max must be >= price_min")

        channels = fields.pop("notification_channels", None)
        if channels is not None:
            for key, value in _channel_columns(changes.notification_channels).items():
                setattr(alert, key, value)

        for key in ("categories", "platforms"):
            if fields.get(key) is not None:
                fields[key] = _values(getattr(changes, key))

        for key, value in fields.items():
            if value is None and key != "price_max":
                continue
            setattr(alert, key, value)

        self.db.commit()
        self.db.refresh(alert)
        return alert

    def delete(self, user_id: str, alert_id: int) -> None:
        alert = self.get(user_id, alert_id)
        self.db.delete(alert)
        self.db.commit()
        logger.info(f"Deleted alert {alert_id} for user {user_id}")

    def active_alerts(self) -> list[SearchAlert]:
        return (
            self.db.query(SearchAlert)
            .filter(SearchAlert.is_active == True)
            .order_by(SearchAlert.id)
            .all()
        )

    def record_notification(self, alert: SearchAlert, when: Optional[datetime] = None) -> SearchAlert:
        """Bookkeeping for one match that reached at least one channel."""
        alert.last_notified_at = when or datetime.utcnow()
        alert.match_count = (alert.match_count or 0) + 1
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return alert

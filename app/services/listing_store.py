"""Listing Store: normalization, idempotent upsert keyed by url, and listing queries."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import ValidationError
from app.models import Listing
from app.schemas import ListingCandidate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "scraped_at": Listing.scraped_at,
    "price": Listing.price,
    "posted_at": Listing.posted_at,
    "title": Listing.title,
}


@dataclass
class UpsertResult:
    listing: Listing
    created: bool


def normalize(candidate: Union[ListingCandidate, dict[str, Any]]) -> ListingCandidate:
    """Coerce a raw adapter candidate into the canonical listing shape."""
    if isinstance(candidate, ListingCandidate):
        return candidate
    try:
        return ListingCandidate.model_validate(candidate)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid listing candidate ({fields}): {e.errors()[0]['msg']}") from e


def _column_values(data: ListingCandidate, fields: set[str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in fields:
        value = getattr(data, name)
        if name == "coordinates":
            values["latitude"] = value.lat if value else None
            values["longitude"] = value.lng if value else None
        elif name == "contact_info":
            values["contact_info"] = value.model_dump(exclude_none=True) if value else None
        elif name == "metadata":
            values["extra"] = dict(value)
        elif name in ("platform", "category"):
            values[name] = value.value
        else:
            values[name] = value
    return values


class ListingStore:
    """Persists listings with insert-or-replace semantics on the unique url."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_url(self, url: str) -> Optional[Listing]:
        return self.db.query(Listing).filter(Listing.url == url).first()

    def upsert(
        self,
        candidate: Union[ListingCandidate, dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> UpsertResult:
        """
        Insert a new listing or replace the provided fields of the stored one.

        Returns:
            UpsertResult with ``created=True`` only when this call inserted the row.

        Raises:
            ValidationError: the candidate lacks a required field, violates
                a constraint other than url uniqueness, or cannot be written.
        """
        data = normalize(candidate)
        now = now or datetime.utcnow()

        existing = self.get_by_url(data.url)
        if existing:
            # Replace only what the candidate provided; scraped_at always refreshes
            values = _column_values(data, set(data.model_fields_set))
            for key, value in values.items():
                setattr(existing, key, value)
            existing.scraped_at = now
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                raise ValidationError(f"Listing {data.url} could not be stored: {e}") from e
            return UpsertResult(existing, created=False)

        values = _column_values(data, set(ListingCandidate.model_fields))
        listing = Listing(**values, scraped_at=now)
        try:
            with self.db.begin_nested():
                self.db.add(listing)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            winner = self.get_by_url(data.url)
            if winner is None:
                raise ValidationError(f"Listing {data.url} violates a storage constraint: {e.orig}") from e
            # Concurrent insert of the same url won the race
            logger.debug(f"Duplicate insert for {data.url} resolved as no-op")
            return UpsertResult(winner, created=False)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ValidationError(f"Listing {data.url} could not be stored: {e}") from e

        return UpsertResult(listing, created=True)

    def deactivate(self, url: str) -> bool:
        """Soft-deactivate a listing; it stays stored but leaves search and alerting."""
        listing = self.get_by_url(url)
        if not listing:
            return False
        listing.is_active = False
        self.db.commit()
        return True

    def search(
        self,
        category: Optional[str] = None,
        platform: Optional[str] = None,
        location: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        limit: int = 50,
        skip: int = 0,
        sort_by: str = "scraped_at",
        sort_order: str = "desc",
    ) -> dict:
        query = self.db.query(Listing).filter(Listing.is_active == True)

        if category:
            query = query.filter(Listing.category == category)
        if platform:
            query = query.filter(Listing.platform == platform)
        if location:
            query = query.filter(Listing.location.ilike(f"%{location}%"))
        if min_price is not None:
            query = query.filter(Listing.price >= min_price)
        if max_price is not None:
            query = query.filter(Listing.price <= max_price)
        if search:
            like = f"%{search}%"
            query = query.filter(or_(Listing.title.ilike(like), Listing.description.ilike(like)))

        total = query.count()

        column = SORT_COLUMNS.get(sort_by, Listing.scraped_at)
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc(), Listing.id.desc())
        items = query.offset(skip).limit(limit).all()

        return {
            "items": items,
            "total": total,
            "limit": limit,
            "skip": skip,
            "has_more": total > skip + limit,
        }

    def summary(self) -> dict:
        """Category counts with average price, and platform counts, over active listings."""
        categories = (
            self.db.query(Listing.category, func.count(Listing.id), func.avg(Listing.price))
            .filter(Listing.is_active == True)
            .group_by(Listing.category)
            .order_by(func.count(Listing.id).desc())
            .all()
        )
        platforms = (
            self.db.query(Listing.platform, func.count(Listing.id))
            .filter(Listing.is_active == True)
            .group_by(Listing.platform)
            .order_by(func.count(Listing.id).desc())
            .all()
        )
        return {
            "categories": [
                {"name": name, "count": count, "avg_price": round(float(avg or 0))}
                for name, count, avg in categories
            ],
            "platforms": [{"name": name, "count": count} for name, count in platforms],
        }

    def stats(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        total = self.db.query(func.count(Listing.id)).filter(Listing.is_active == True).scalar()
        recent = (
            self.db.query(func.count(Listing.id))
            .filter(Listing.scraped_at >= now - timedelta(hours=24))
            .scalar()
        )
        last_scraped_at = self.db.query(func.max(Listing.scraped_at)).scalar()
        return {
            "total_listings": total or 0,
            "recent_listings": recent or 0,
            "last_scraped_at": last_scraped_at,
        }

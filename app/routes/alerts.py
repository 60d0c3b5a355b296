"""Search alert CRUD scoped to a user, plus the test-send operation."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas import AlertCreate, AlertOut, AlertTestRequest, AlertUpdate
from app.services.alert_matcher import AlertMatcher
from app.services.alert_store import AlertStore
from app.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alerts")


def _out(alert) -> dict:
    return AlertOut.from_model(alert).model_dump(mode="json")


@router.post("", status_code=201)
async def create_alert(payload: AlertCreate, db: Session = Depends(get_db)):
    alert = AlertStore(db).create(payload)
    return {"success": True, "alert": _out(alert)}


@router.get("/{user_id}")
async def list_alerts(user_id: str, db: Session = Depends(get_db)):
    alerts = AlertStore(db).list_for_user(user_id)
    return {"success": True, "alerts": [_out(a) for a in alerts]}


@router.get("/{user_id}/{alert_id}")
async def get_alert(user_id: str, alert_id: int, db: Session = Depends(get_db)):
    return {"success": True, "alert": _out(AlertStore(db).get(user_id, alert_id))}


@router.put("/{user_id}/{alert_id}")
async def update_alert(user_id: str, alert_id: int, payload: AlertUpdate, db: Session = Depends(get_db)):
    alert = AlertStore(db).update(user_id, alert_id, payload)
    return {"success": True, "alert": _out(alert)}


@router.delete("/{user_id}/{alert_id}")
async def delete_alert(user_id: str, alert_id: int, db: Session = Depends(get_db)):
    AlertStore(db).delete(user_id, alert_id)
    return {"success": True, "message": "Alert deleted"}


@router.post("/{user_id}/{alert_id}/test")
async def test_alert(
    user_id: str,
    alert_id: int,
    payload: AlertTestRequest | None = None,
    db: Session = Depends(get_db),
):
    """
    Run a sample listing through matching and dispatch without a scrape.

    Defaults to a $100 furniture item on craigslist in New York. Does not
    update the alert's match bookkeeping.
    """
    matcher = AlertMatcher(AlertStore(db), NotificationDispatcher(settings))
    result = await matcher.test_alert(user_id, alert_id, payload.listing if payload else None)
    return {"success": True, "result": result}

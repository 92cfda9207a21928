from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.portfolio.schemas.alerts import AlertGenerationOut, AlertOut
from sukuk_tracker.domain.portfolio.services.alert_monitor import generate_payment_alerts, list_alerts, mark_alert_read


router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=list[AlertOut])
def get_alerts(unread_only: bool = False, db: Session = Depends(get_db)):
    return list_alerts(db, unread_only=unread_only)


@router.post("/generate", response_model=AlertGenerationOut)
def generate_alerts(db: Session = Depends(get_db)):
    alerts = generate_payment_alerts(db)
    return AlertGenerationOut(generated_count=len(alerts), alerts=[AlertOut.model_validate(a) for a in alerts])


@router.patch("/{alert_id}/read", response_model=AlertOut)
def read_alert(alert_id: uuid.UUID, db: Session = Depends(get_db)):
    alert = mark_alert_read(db, alert_id=alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert

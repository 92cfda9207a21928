from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from sukuk_tracker.domain.portfolio.enums import AlertSeverity, AlertType


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    investment_id: uuid.UUID | None
    cashflow_id: uuid.UUID | None
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    read: bool
    created_at: datetime


class AlertGenerationOut(BaseModel):
    generated_count: int
    alerts: list[AlertOut]

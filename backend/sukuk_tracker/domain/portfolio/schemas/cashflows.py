from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from sukuk_tracker.domain.portfolio.enums import CashflowStatus, CashflowType
from sukuk_tracker.domain.portfolio.schemas.investments import LateDaysUpdate


class CashflowCreate(BaseModel):
    investment_id: uuid.UUID
    due_date: date
    amount: Decimal = Field(gt=0)
    type: CashflowType = CashflowType.PROFIT
    status: CashflowStatus = CashflowStatus.UPCOMING


class CashflowUpdate(BaseModel):
    due_date: date | None = None
    amount: Decimal | None = Field(default=None, gt=0)
    type: CashflowType | None = None
    status: CashflowStatus | None = None
    received_date: date | None = None
    clear_late_status: bool = False
    update_late_info: LateDaysUpdate | None = None


class CashflowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    investment_id: uuid.UUID
    due_date: date
    amount: Decimal
    type: CashflowType
    status: CashflowStatus
    received_date: date | None

from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from sukuk_tracker.domain.cash_management.enums import CashTransactionSource, CashTransactionType


class CashTransactionCreate(BaseModel):
    type: CashTransactionType
    amount: Decimal = Field(gt=0)
    date: dt.date
    source: CashTransactionSource | None = None
    notes: str | None = Field(default=None, max_length=2000)
    platform_id: uuid.UUID | None = None


class CashTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: CashTransactionType
    amount: Decimal
    date: dt.date
    source: str | None
    notes: str | None
    investment_id: uuid.UUID | None
    cashflow_id: uuid.UUID | None
    platform_id: uuid.UUID | None


class CashBalanceOut(BaseModel):
    total: Decimal
    by_platform: dict[uuid.UUID, Decimal]

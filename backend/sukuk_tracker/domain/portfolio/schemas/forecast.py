from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class MonthlyForecastOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    month_start: date
    principal: Decimal
    profit: Decimal
    total: Decimal


class ForecastOut(BaseModel):
    months: list[MonthlyForecastOut]
    summaries: dict[str, dict[str, Decimal]]

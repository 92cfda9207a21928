from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.portfolio.schemas.forecast import ForecastOut, MonthlyForecastOut
from sukuk_tracker.domain.portfolio.services.cashflows import list_cashflows
from sukuk_tracker.domain.portfolio.services.forecast import calculate_monthly_forecast, forecast_summaries
from sukuk_tracker.shared.utils import utctoday


router = APIRouter(prefix="/forecast", tags=["Forecast"])


@router.get("", response_model=ForecastOut)
def get_forecast(months: int = Query(default=settings.forecast_months, ge=1, le=120), db: Session = Depends(get_db)):
    forecast = calculate_monthly_forecast(list_cashflows(db), today=utctoday(), months=months)
    return ForecastOut(
        months=[
            MonthlyForecastOut(month=m.month, month_start=m.month_start, principal=m.principal, profit=m.profit, total=m.total)
            for m in forecast
        ],
        summaries=forecast_summaries(forecast),
    )

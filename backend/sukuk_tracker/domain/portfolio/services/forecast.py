from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sukuk_tracker.domain.portfolio.enums import CashflowStatus, CashflowType
from sukuk_tracker.domain.portfolio.services.duration import add_months

SUMMARY_PERIODS = (1, 3, 6, 12, 24)

_FORECAST_STATUSES = frozenset({CashflowStatus.EXPECTED, CashflowStatus.UPCOMING})


@dataclass
class MonthlyForecast:
    month: str
    month_start: date
    principal: Decimal = Decimal("0.00")
    profit: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return self.principal + self.profit


def calculate_monthly_forecast(cashflows: Iterable, *, today: date, months: int = 40) -> list[MonthlyForecast]:
    """
    Bucket expected and upcoming cashflows by calendar month.

    The window starts at the first day of the current month and spans
    `months` buckets; every bucket is present even when empty.
    """
    window_start = today.replace(day=1)
    buckets: dict[str, MonthlyForecast] = {}
    for i in range(months):
        month_start = add_months(window_start, i)
        key = month_start.strftime("%Y-%m")
        buckets[key] = MonthlyForecast(month=key, month_start=month_start)

    for cf in cashflows:
        if cf.status not in _FORECAST_STATUSES:
            continue
        bucket = buckets.get(cf.due_date.strftime("%Y-%m"))
        if bucket is None:
            continue
        if cf.type == CashflowType.PRINCIPAL:
            bucket.principal += cf.amount
        else:
            bucket.profit += cf.amount

    return list(buckets.values())


def forecast_summaries(forecast: list[MonthlyForecast]) -> dict[str, dict[str, Decimal]]:
    summaries: dict[str, dict[str, Decimal]] = {}
    for months in SUMMARY_PERIODS:
        period = forecast[:months]
        principal = sum((m.principal for m in period), Decimal("0.00"))
        profit = sum((m.profit for m in period), Decimal("0.00"))
        summaries[f"months_{months}"] = {"principal": principal, "profit": profit, "total": principal + profit}
    return summaries

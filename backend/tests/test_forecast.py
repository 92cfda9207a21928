from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from sukuk_tracker.domain.portfolio.enums import CashflowStatus, CashflowType
from sukuk_tracker.domain.portfolio.services.forecast import calculate_monthly_forecast, forecast_summaries


def _cf(due, amount, type_=CashflowType.PROFIT, status=CashflowStatus.EXPECTED):
    return SimpleNamespace(due_date=due, amount=Decimal(amount), type=type_, status=status)


def test_monthly_forecast_buckets_by_month_and_type():
    cashflows = [
        _cf(date(2025, 1, 20), "1000", CashflowType.PRINCIPAL),
        _cf(date(2025, 2, 10), "50", status=CashflowStatus.UPCOMING),
        _cf(date(2025, 2, 11), "25", status=CashflowStatus.RECEIVED),
        _cf(date(2025, 4, 1), "70"),
        _cf(date(2024, 12, 31), "90"),
    ]

    forecast = calculate_monthly_forecast(cashflows, today=date(2025, 1, 15), months=3)

    assert [m.month for m in forecast] == ["2025-01", "2025-02", "2025-03"]
    assert forecast[0].month_start == date(2025, 1, 1)
    assert (forecast[0].principal, forecast[0].profit) == (Decimal("1000"), Decimal("0.00"))
    assert forecast[1].total == Decimal("50")
    assert forecast[2].total == Decimal("0.00")

    summaries = forecast_summaries(forecast)
    assert summaries["months_1"]["total"] == Decimal("1000")
    assert summaries["months_3"] == {"principal": Decimal("1000"), "profit": Decimal("50"), "total": Decimal("1050")}
    assert summaries["months_24"]["total"] == Decimal("1050")


def test_default_window_is_forty_months():
    forecast = calculate_monthly_forecast([], today=date(2025, 1, 15))
    assert len(forecast) == 40
    assert forecast[-1].month == "2028-04"

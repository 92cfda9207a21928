from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from sukuk_tracker.shared.exceptions import ValidationError
from sukuk_tracker.shared.utils import to_money


def months_between(start: date, end: date) -> int:
    """
    Investment duration in months.

    A partial trailing month counts as a full month, and any positive span is
    at least one month, so short-term deals never get a zero duration.
    """
    if end <= start:
        return 0

    total = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day > start.day:
        total += 1
    return max(1, total)


def add_months(d: date, months: int) -> date:
    # Day is clamped to the end of the target month (Jan 31 + 1 -> Feb 28/29).
    return d + relativedelta(months=months)


def estimate_expected_profit(face_value: Decimal, irr_percent: Decimal, duration_months: int) -> Decimal:
    """Simple-interest estimate: face_value x IRR x years, rounded to cents."""
    if face_value <= 0 or irr_percent < 0 or duration_months <= 0:
        return Decimal("0.00")
    profit = Decimal(face_value) * (Decimal(irr_percent) / Decimal(100)) * (Decimal(duration_months) / Decimal(12))
    return to_money(profit)


@dataclass(frozen=True)
class ResolvedFinancials:
    face_value: Decimal
    expected_irr: Decimal
    start_date: date
    end_date: date
    duration_months: int
    total_expected_profit: Decimal


def resolve_financials(
    *,
    face_value: Decimal,
    expected_irr: Decimal,
    start_date: date,
    end_date: date | None = None,
    duration_months: int | None = None,
    total_expected_profit: Decimal | None = None,
) -> ResolvedFinancials:
    """
    Keep dates, duration and profit consistent.

    - end_date wins when given; duration is always recomputed from the dates
    - otherwise end_date is derived from duration_months
    - a missing or zero profit is estimated from the IRR
    """
    if face_value is None or face_value <= 0:
        raise ValidationError("face_value must be positive")
    if expected_irr is not None and expected_irr < 0:
        raise ValidationError("expected_irr must not be negative")

    if end_date is None:
        if not duration_months:
            raise ValidationError("Either end_date or duration_months must be provided")
        end_date = add_months(start_date, duration_months)

    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date")

    months = months_between(start_date, end_date)
    irr = Decimal(expected_irr or 0)

    if total_expected_profit is not None and total_expected_profit < 0:
        raise ValidationError("total_expected_profit must not be negative")
    if not total_expected_profit:
        total_expected_profit = estimate_expected_profit(face_value, irr, months)

    return ResolvedFinancials(
        face_value=to_money(face_value),
        expected_irr=irr,
        start_date=start_date,
        end_date=end_date,
        duration_months=months,
        total_expected_profit=to_money(total_expected_profit),
    )

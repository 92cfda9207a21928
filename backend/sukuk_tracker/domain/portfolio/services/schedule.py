from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from sukuk_tracker.domain.portfolio.enums import CashflowType, DistributionFrequency, ProfitPaymentStructure
from sukuk_tracker.domain.portfolio.services.duration import add_months
from sukuk_tracker.shared.utils import to_money


_INTERVAL_MONTHS: dict[DistributionFrequency, int] = {
    DistributionFrequency.MONTHLY: 1,
    DistributionFrequency.QUARTERLY: 3,
    DistributionFrequency.SEMI_ANNUALLY: 6,
    DistributionFrequency.ANNUALLY: 12,
}


@dataclass(frozen=True)
class GeneratedCashflow:
    due_date: date
    amount: Decimal
    type: CashflowType


def interval_months(frequency: DistributionFrequency) -> int:
    return _INTERVAL_MONTHS.get(frequency, 12)


def payment_dates(start_date: date, end_date: date, frequency: DistributionFrequency) -> list[date]:
    """
    Every interval step after start_date up to and including end_date; end_date alone if none fit.

    Each date is stepped from the previous one, so a day clamped at a short
    month stays clamped (Jan 31 -> Feb 29 -> Mar 29).
    """
    step = interval_months(frequency)
    dates: list[date] = []
    current = add_months(start_date, step)
    while current <= end_date:
        dates.append(current)
        current = add_months(current, step)

    if not dates:
        dates.append(end_date)
    return dates


def generate_cashflows(
    *,
    start_date: date,
    end_date: date,
    face_value: Decimal,
    total_expected_profit: Decimal,
    frequency: DistributionFrequency,
    structure: ProfitPaymentStructure = ProfitPaymentStructure.PERIODIC,
) -> list[GeneratedCashflow]:
    """
    Build the expected repayment schedule of an investment.

    at_maturity frequency keeps profit and principal as two co-dated events so
    each can be reconciled against the ledger on its own. Periodic frequencies
    split profit evenly over the payment dates (no remainder correction) and
    pay principal one day after the last profit date. A deferred-profit
    structure folds all profit into the single principal event at maturity.

    Callers must not pass end_date <= start_date or the custom frequency.
    """
    face_value = to_money(face_value)
    total_expected_profit = to_money(total_expected_profit)
    cashflows: list[GeneratedCashflow] = []

    if frequency == DistributionFrequency.AT_MATURITY:
        if total_expected_profit > 0:
            cashflows.append(GeneratedCashflow(end_date, total_expected_profit, CashflowType.PROFIT))
        cashflows.append(GeneratedCashflow(end_date, face_value, CashflowType.PRINCIPAL))
        return cashflows

    dates = payment_dates(start_date, end_date, frequency)

    if structure == ProfitPaymentStructure.PERIODIC:
        per_payment = to_money(total_expected_profit / len(dates))
        if per_payment > 0:
            for d in dates:
                cashflows.append(GeneratedCashflow(d, per_payment, CashflowType.PROFIT))
        cashflows.append(GeneratedCashflow(dates[-1] + timedelta(days=1), face_value, CashflowType.PRINCIPAL))
    else:
        # Profit is not itemized here; it rides on the principal event.
        cashflows.append(GeneratedCashflow(end_date, total_expected_profit + face_value, CashflowType.PRINCIPAL))

    return sorted(cashflows, key=lambda cf: cf.due_date)


def degenerate_schedule(*, end_date: date, face_value: Decimal, total_expected_profit: Decimal) -> list[GeneratedCashflow]:
    """Single principal+profit payment on end_date, for dates the generator cannot walk."""
    return [GeneratedCashflow(end_date, to_money(face_value) + to_money(total_expected_profit), CashflowType.PRINCIPAL)]


def count_payments(start_date: date, end_date: date, frequency: DistributionFrequency) -> int:
    if frequency == DistributionFrequency.AT_MATURITY:
        return 1
    return len(payment_dates(start_date, end_date, frequency))

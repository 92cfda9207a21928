"""
Investment status manager.

Derives an investment's lifecycle status from its cashflows:

- active -> late       a payment is overdue
- late -> defaulted    the oldest overdue payment is past the grace period
- any -> completed     every cashflow has been received

`pending` investments are never moved here; they leave that state through
an explicit update once funding is confirmed.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from sukuk_tracker.domain.portfolio.enums import CashflowStatus, InvestmentStatus
from sukuk_tracker.shared.exceptions import Conflict, ValidationError

GRACE_PERIOD_DAYS = 30


@dataclass(frozen=True)
class StatusDecision:
    investment_id: uuid.UUID
    status: InvestmentStatus
    late_date: date | None = None
    defaulted_date: date | None = None


def determine_status(
    investment,
    cashflows: Sequence,
    *,
    today: date,
    grace_period_days: int = GRACE_PERIOD_DAYS,
) -> StatusDecision:
    if cashflows and all(cf.status == CashflowStatus.RECEIVED for cf in cashflows):
        return StatusDecision(investment.id, InvestmentStatus.COMPLETED)

    overdue = [cf.due_date for cf in cashflows if cf.status != CashflowStatus.RECEIVED and cf.due_date < today]
    if not overdue:
        return StatusDecision(investment.id, InvestmentStatus.ACTIVE)

    oldest_due = min(overdue)
    days_past_due = (today - oldest_due).days
    late_date = investment.late_date or oldest_due

    if days_past_due > grace_period_days:
        return StatusDecision(
            investment.id,
            InvestmentStatus.DEFAULTED,
            late_date=late_date,
            defaulted_date=oldest_due + timedelta(days=grace_period_days),
        )

    return StatusDecision(investment.id, InvestmentStatus.LATE, late_date=late_date, defaulted_date=None)


def check_all_statuses(
    investments_with_cashflows: Iterable[tuple[object, Sequence]],
    *,
    today: date,
    grace_period_days: int = GRACE_PERIOD_DAYS,
) -> list[StatusDecision]:
    """Decisions for the investments whose status would change."""
    updates: list[StatusDecision] = []
    for investment, cashflows in investments_with_cashflows:
        if investment.status == InvestmentStatus.PENDING:
            continue
        decision = determine_status(investment, cashflows, today=today, grace_period_days=grace_period_days)
        if decision.status != investment.status:
            updates.append(decision)
    return updates


_TRANSITION_MESSAGES: dict[tuple[InvestmentStatus, InvestmentStatus], str] = {
    (InvestmentStatus.ACTIVE, InvestmentStatus.LATE): "Investment marked as late due to overdue payment",
    (InvestmentStatus.LATE, InvestmentStatus.DEFAULTED): "Investment marked as defaulted after the grace period",
    (InvestmentStatus.ACTIVE, InvestmentStatus.DEFAULTED): "Investment marked as defaulted after the grace period",
    (InvestmentStatus.ACTIVE, InvestmentStatus.COMPLETED): "Investment completed - all payments received",
    (InvestmentStatus.LATE, InvestmentStatus.COMPLETED): "Investment completed - all payments received",
    (InvestmentStatus.DEFAULTED, InvestmentStatus.COMPLETED): "Investment completed - all payments received",
    (InvestmentStatus.LATE, InvestmentStatus.ACTIVE): "Investment back to active status",
}


def status_transition_message(old: InvestmentStatus, new: InvestmentStatus) -> str:
    return _TRANSITION_MESSAGES.get((old, new), f"Status changed from {old.value} to {new.value}")


@dataclass(frozen=True)
class LateStatusOption:
    """
    Caller's choice for late/defaulted investments once payments arrive:
    leave the dates alone, clear them, or back-date `late_date` by N days.
    """

    clear: bool = False
    late_days: int | None = None

    @classmethod
    def from_request(cls, *, clear_late_status: bool = False, late_days: int | None = None) -> "LateStatusOption":
        if clear_late_status and late_days is not None:
            raise Conflict("Cannot both clear late status and update late info simultaneously")
        if late_days is not None and late_days < 1:
            raise ValidationError("late_days must be at least 1")
        return cls(clear=clear_late_status, late_days=late_days)

    def late_date_for(self, today: date) -> date | None:
        if self.late_days is None:
            return None
        return today - timedelta(days=self.late_days)

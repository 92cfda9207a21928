from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.portfolio.enums import CashflowStatus, InvestmentStatus
from sukuk_tracker.domain.portfolio.models.cashflows import Cashflow
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.domain.portfolio.services.cashflows import credit_received_cashflow
from sukuk_tracker.domain.portfolio.services.status_manager import LateStatusOption
from sukuk_tracker.shared.exceptions import Conflict, NotFound
from sukuk_tracker.shared.utils import utctoday

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    updated_count: int
    total_amount: Decimal


def complete_all_payments(
    db: Session,
    *,
    investment_id: uuid.UUID,
    received_date: date | None = None,
    use_due_dates: bool = False,
    late_option: LateStatusOption | None = None,
    today: date | None = None,
) -> CompletionResult:
    """
    Mark every outstanding cashflow of an investment as received.

    The investment row and its outstanding cashflows are locked for the whole
    unit of work. Each cashflow is credited to the pool at most once, so a
    retried completion never writes a second ledger entry.
    """
    today = today or utctoday()
    late_option = late_option or LateStatusOption()

    try:
        investment = db.execute(
            select(Investment).where(Investment.id == investment_id).with_for_update(of=Investment)
        ).scalar_one_or_none()
        if investment is None:
            raise NotFound("Investment not found")
        if investment.status == InvestmentStatus.PENDING:
            raise Conflict("Cannot complete payments of a pending investment")
        if investment.status == InvestmentStatus.COMPLETED and not use_due_dates:
            raise Conflict("Investment is already completed")

        outstanding = db.execute(
            select(Cashflow)
            .where(Cashflow.investment_id == investment.id, Cashflow.status != CashflowStatus.RECEIVED)
            .order_by(Cashflow.due_date.asc())
            .with_for_update()
        ).scalars().all()

        total = Decimal("0")
        for cf in outstanding:
            cf.status = CashflowStatus.RECEIVED
            cf.received_date = cf.due_date if use_due_dates else (received_date or today)
            credit_received_cashflow(db, cashflow=cf, investment=investment)
            total += cf.amount

        previous = investment.status
        if previous in (InvestmentStatus.LATE, InvestmentStatus.DEFAULTED):
            investment.status = InvestmentStatus.COMPLETED
            if late_option.clear:
                investment.late_date = None
                investment.defaulted_date = None
            elif late_option.late_days is not None:
                investment.late_date = late_option.late_date_for(today)
        elif previous == InvestmentStatus.ACTIVE:
            investment.status = InvestmentStatus.COMPLETED
        elif previous == InvestmentStatus.COMPLETED:
            # Re-run in due-date mode: only stale milestone dates are cleaned up.
            investment.late_date = None
            investment.defaulted_date = None

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "investment.payments_completed",
        investment_id=str(investment_id),
        previous_status=previous.value,
        updated_count=len(outstanding),
        total_amount=str(total),
        use_due_dates=use_due_dates,
    )
    return CompletionResult(updated_count=len(outstanding), total_amount=total)

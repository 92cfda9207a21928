from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.cash_management.enums import CashTransactionSource, CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.portfolio.enums import CashflowStatus, CashflowType, InvestmentStatus
from sukuk_tracker.domain.portfolio.models.alerts import Alert
from sukuk_tracker.domain.portfolio.models.cashflows import Cashflow
from sukuk_tracker.domain.portfolio.models.custom_distributions import CustomDistribution
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.domain.portfolio.schemas.cashflows import CashflowCreate, CashflowUpdate
from sukuk_tracker.domain.portfolio.services.status_manager import LateStatusOption
from sukuk_tracker.shared.exceptions import Conflict, NotFound
from sukuk_tracker.shared.utils import to_money, utctoday

logger = get_logger(__name__)


def append_note(existing: str | None, note: str) -> str:
    return f"{existing}\n{note}" if existing else note


def credit_received_cashflow(db: Session, *, cashflow: Cashflow, investment: Investment) -> CashTransaction | None:
    """
    Credit a received cashflow to the cash pool.

    Idempotent: returns None when a ledger entry already references the
    cashflow, so re-running a completion never double-credits.
    """
    existing = db.execute(select(CashTransaction.id).where(CashTransaction.cashflow_id == cashflow.id)).first()
    if existing is not None:
        return None

    source = CashTransactionSource.PROFIT if cashflow.type == CashflowType.PROFIT else CashTransactionSource.INVESTMENT_RETURN
    tx = CashTransaction(
        type=CashTransactionType.DISTRIBUTION,
        amount=cashflow.amount,
        source=source.value,
        date=cashflow.received_date or cashflow.due_date,
        investment_id=investment.id,
        cashflow_id=cashflow.id,
        platform_id=investment.platform_id,
        notes=f"{cashflow.type.value} payment from investment #{investment.investment_number} ({investment.name})",
    )
    db.add(tx)
    return tx


def detach_ledger_entry(tx: CashTransaction, *, platform_id: uuid.UUID | None, note: str) -> None:
    """Keep a realized movement in the pool while dropping its links to deleted rows."""
    tx.platform_id = tx.platform_id or platform_id
    tx.investment_id = None
    tx.cashflow_id = None
    tx.notes = append_note(tx.notes, note)


def list_cashflows(db: Session, *, investment_id: uuid.UUID | None = None) -> list[Cashflow]:
    stmt = select(Cashflow).order_by(Cashflow.due_date.asc())
    if investment_id is not None:
        stmt = stmt.where(Cashflow.investment_id == investment_id)
    return list(db.execute(stmt).scalars().all())


def get_cashflow(db: Session, *, cashflow_id: uuid.UUID) -> Cashflow:
    cf = db.get(Cashflow, cashflow_id)
    if cf is None:
        raise NotFound("Cashflow not found")
    return cf


def create_cashflow(db: Session, *, payload: CashflowCreate, today: date | None = None) -> Cashflow:
    today = today or utctoday()
    try:
        investment = db.execute(
            select(Investment).where(Investment.id == payload.investment_id).with_for_update(of=Investment)
        ).scalar_one_or_none()
        if investment is None:
            raise NotFound("Investment not found")

        cf = Cashflow(
            investment_id=investment.id,
            due_date=payload.due_date,
            amount=to_money(payload.amount),
            type=payload.type,
            status=payload.status,
            received_date=today if payload.status == CashflowStatus.RECEIVED else None,
        )
        db.add(cf)
        db.flush()

        if cf.status == CashflowStatus.RECEIVED:
            credit_received_cashflow(db, cashflow=cf, investment=investment)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(cf)
    logger.info("cashflow.created", cashflow_id=str(cf.id), investment_id=str(cf.investment_id), status=cf.status.value)
    return cf


def update_cashflow(
    db: Session,
    *,
    cashflow_id: uuid.UUID,
    payload: CashflowUpdate,
    today: date | None = None,
) -> Cashflow:
    """
    Update one cashflow under a row lock on its pre-image.

    Receiving a cashflow credits the pool exactly once; moving it back out of
    `received` removes that credit. On a late/defaulted investment the late
    option decides what happens to the milestone dates.
    """
    today = today or utctoday()
    late_days = payload.update_late_info.late_days if payload.update_late_info else None
    option = LateStatusOption.from_request(clear_late_status=payload.clear_late_status, late_days=late_days)
    changes = payload.model_dump(exclude_unset=True, exclude={"clear_late_status", "update_late_info"})

    try:
        cf = db.execute(select(Cashflow).where(Cashflow.id == cashflow_id).with_for_update()).scalar_one_or_none()
        if cf is None:
            raise NotFound("Cashflow not found")

        was_received = cf.status == CashflowStatus.RECEIVED
        new_status = changes.get("status") or cf.status
        if was_received and new_status == CashflowStatus.RECEIVED:
            if "amount" in changes and to_money(changes["amount"]) != cf.amount:
                raise Conflict("A received cashflow's amount cannot change")
            if changes.get("received_date") and changes["received_date"] != cf.received_date:
                raise Conflict("A received cashflow's received date is immutable")

        if "due_date" in changes and changes["due_date"] is not None:
            cf.due_date = changes["due_date"]
        if "amount" in changes and changes["amount"] is not None:
            cf.amount = to_money(changes["amount"])
        if "type" in changes and changes["type"] is not None:
            cf.type = changes["type"]

        if new_status == CashflowStatus.RECEIVED and not was_received:
            cf.status = CashflowStatus.RECEIVED
            cf.received_date = changes.get("received_date") or today
            db.flush()

            investment = db.execute(
                select(Investment).where(Investment.id == cf.investment_id).with_for_update(of=Investment)
            ).scalar_one()
            credit_received_cashflow(db, cashflow=cf, investment=investment)

            if investment.status in (InvestmentStatus.LATE, InvestmentStatus.DEFAULTED):
                if option.clear:
                    # The sweeper re-derives the real status on its next tick.
                    investment.status = InvestmentStatus.ACTIVE
                    investment.late_date = None
                    investment.defaulted_date = None
                elif option.late_days is not None:
                    investment.late_date = option.late_date_for(today)
        elif was_received and new_status != CashflowStatus.RECEIVED:
            cf.status = new_status
            cf.received_date = None
            db.execute(delete(CashTransaction).where(CashTransaction.cashflow_id == cf.id))
        else:
            cf.status = new_status

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(cf)
    logger.info(
        "cashflow.received" if cf.status == CashflowStatus.RECEIVED and not was_received else "cashflow.updated",
        cashflow_id=str(cf.id),
        investment_id=str(cf.investment_id),
        status=cf.status.value,
        was_received=was_received,
    )
    return cf


def delete_cashflow(db: Session, *, cashflow_id: uuid.UUID) -> None:
    try:
        cf = db.execute(select(Cashflow).where(Cashflow.id == cashflow_id).with_for_update()).scalar_one_or_none()
        if cf is None:
            raise NotFound("Cashflow not found")

        entries = db.execute(select(CashTransaction).where(CashTransaction.cashflow_id == cf.id)).scalars().all()
        if cf.status == CashflowStatus.RECEIVED:
            investment = db.get(Investment, cf.investment_id)
            for tx in entries:
                detach_ledger_entry(
                    tx,
                    platform_id=investment.platform_id if investment else None,
                    note=f"Source cashflow due {cf.due_date.isoformat()} deleted",
                )
                # Cashflow link only; the investment still exists.
                tx.investment_id = cf.investment_id
        else:
            for tx in entries:
                db.delete(tx)
        db.flush()

        db.execute(delete(CustomDistribution).where(CustomDistribution.cashflow_id == cf.id))
        db.execute(delete(Alert).where(Alert.cashflow_id == cf.id))
        db.delete(cf)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("cashflow.deleted", cashflow_id=str(cashflow_id))

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.cash_management.schemas import CashTransactionCreate
from sukuk_tracker.domain.cash_management.services.ledger import lock_all_entries, lock_platform_entries, locked_balance
from sukuk_tracker.domain.portfolio.models.platforms import Platform
from sukuk_tracker.shared.exceptions import InsufficientFunds, NotFound, ValidationError
from sukuk_tracker.shared.utils import to_money

logger = get_logger(__name__)

# Investment funding and distributions are written by the portfolio services only.
_MANUAL_TYPES = frozenset({CashTransactionType.DEPOSIT, CashTransactionType.WITHDRAWAL, CashTransactionType.TRANSFER})


def list_transactions(db: Session, *, platform_id: uuid.UUID | None = None) -> list[CashTransaction]:
    stmt = select(CashTransaction).order_by(CashTransaction.date.desc(), CashTransaction.created_at.desc())
    if platform_id is not None:
        stmt = stmt.where(CashTransaction.platform_id == platform_id)
    return list(db.execute(stmt).scalars().all())


def create_transaction(db: Session, *, payload: CashTransactionCreate) -> CashTransaction:
    """
    Record a manual pool movement (no investment links).

    Outflows are checked against a locked balance: the platform partition
    when the movement is platform-scoped, otherwise the whole pool.
    """
    if payload.type not in _MANUAL_TYPES:
        raise ValidationError(f"'{payload.type.value}' transactions are created by the portfolio services")

    amount = to_money(payload.amount)
    try:
        if payload.platform_id is not None and db.get(Platform, payload.platform_id) is None:
            raise NotFound("Platform not found")

        if payload.type != CashTransactionType.DEPOSIT:
            if payload.platform_id is not None:
                entries = lock_platform_entries(db, platform_id=payload.platform_id)
            else:
                entries = lock_all_entries(db)
            available = locked_balance(entries)
            if available < amount:
                raise InsufficientFunds(required=amount, available=available)

        tx = CashTransaction(
            type=payload.type,
            amount=amount,
            date=payload.date,
            source=payload.source.value if payload.source else None,
            notes=payload.notes,
            platform_id=payload.platform_id,
        )
        db.add(tx)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(tx)
    logger.info(
        "cash_transaction.created",
        transaction_id=str(tx.id),
        type=tx.type.value,
        amount=str(tx.amount),
        platform_id=str(tx.platform_id) if tx.platform_id else None,
    )
    return tx

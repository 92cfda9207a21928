from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.portfolio.models.investments import Investment


_INFLOW_TYPES = frozenset({CashTransactionType.DEPOSIT, CashTransactionType.DISTRIBUTION})


def signed_amount(tx_type: CashTransactionType, amount: Decimal) -> Decimal:
    """
    The only place a ledger sign is decided.

    Deposits and distributions add to the pool; withdrawals, investments and
    transfers take from it. Stored amounts are magnitudes.
    """
    magnitude = abs(Decimal(amount))
    return magnitude if CashTransactionType(tx_type) in _INFLOW_TYPES else -magnitude


@dataclass(frozen=True)
class LedgerRow:
    type: CashTransactionType
    amount: Decimal
    platform_id: uuid.UUID | None = None
    investment_platform_id: uuid.UUID | None = None


@dataclass(frozen=True)
class CashBalance:
    total: Decimal = Decimal("0.00")
    by_platform: dict[uuid.UUID, Decimal] = field(default_factory=dict)


def calculate_balance(rows: Iterable[LedgerRow]) -> CashBalance:
    """
    Aggregate signed movements into a total and a per-platform breakdown.

    Platform comes from the entry itself, else from its linked investment.
    Entries with neither only count toward the total.
    """
    total = Decimal("0.00")
    by_platform: dict[uuid.UUID, Decimal] = {}
    for row in rows:
        effect = signed_amount(row.type, row.amount)
        total += effect
        platform_id = row.platform_id or row.investment_platform_id
        if platform_id is not None:
            by_platform[platform_id] = by_platform.get(platform_id, Decimal("0.00")) + effect
    return CashBalance(total=total, by_platform=by_platform)


def _ledger_rows_stmt():
    return (
        select(CashTransaction.type, CashTransaction.amount, CashTransaction.platform_id, Investment.platform_id)
        .select_from(CashTransaction)
        .outerjoin(Investment, Investment.id == CashTransaction.investment_id)
    )


def get_cash_balance(db: Session) -> CashBalance:
    rows = db.execute(_ledger_rows_stmt()).all()
    return calculate_balance(LedgerRow(t, a, p, ip) for t, a, p, ip in rows)


def lock_platform_entries(db: Session, *, platform_id: uuid.UUID) -> list[CashTransaction]:
    """
    SELECT ... FOR UPDATE every ledger entry of a platform partition.

    Covers entries tagged with the platform and untagged entries linked to an
    investment held on it. Must run inside the unit of work that makes the
    balance-dependent decision.
    """
    investment_ids = select(Investment.id).where(Investment.platform_id == platform_id)
    stmt = (
        select(CashTransaction)
        .where(
            or_(
                CashTransaction.platform_id == platform_id,
                and_(CashTransaction.platform_id.is_(None), CashTransaction.investment_id.in_(investment_ids)),
            )
        )
        .with_for_update()
    )
    return list(db.execute(stmt).scalars().all())


def lock_all_entries(db: Session) -> list[CashTransaction]:
    return list(db.execute(select(CashTransaction).with_for_update()).scalars().all())


def locked_balance(entries: Iterable[CashTransaction]) -> Decimal:
    return sum((signed_amount(e.type, e.amount) for e in entries), Decimal("0.00"))

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Enum as SAEnum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin
from sukuk_tracker.domain.cash_management.enums import CashTransactionType


class CashTransaction(Base, IdMixin, TimestampMixin):
    """
    One movement of the cash pool.

    `amount` is always a positive magnitude; the signed effect on the balance
    is derived from `type` (see services.ledger.signed_amount).
    """

    __tablename__ = "cash_transactions"

    type: Mapped[CashTransactionType] = mapped_column(SAEnum(CashTransactionType, name="cash_tx_type_enum"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    source: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    investment_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("investments.id", ondelete="SET NULL"), nullable=True, index=True)
    # Unique: a received cashflow is credited to the pool exactly once.
    cashflow_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("cashflows.id", ondelete="SET NULL"), nullable=True, unique=True)
    platform_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("platforms.id", ondelete="SET NULL"), nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_cash_transactions_amount_positive"),
        Index("ix_cash_transactions_platform_date", "platform_id", "date"),
    )

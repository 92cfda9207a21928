from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin
from sukuk_tracker.domain.portfolio.enums import CashflowStatus, CashflowType


class Cashflow(Base, IdMixin, TimestampMixin):
    """
    One scheduled or realized payment of an investment.

    `received_date` is only set once the cashflow is received; at that point a
    single distribution ledger entry references it.
    """

    __tablename__ = "cashflows"

    investment_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("investments.id", ondelete="RESTRICT"), index=True)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    type: Mapped[CashflowType] = mapped_column(
        Enum(CashflowType, name="cashflow_type_enum"),
        nullable=False,
        default=CashflowType.PROFIT,
    )
    status: Mapped[CashflowStatus] = mapped_column(
        Enum(CashflowStatus, name="cashflow_status_enum"),
        nullable=False,
        default=CashflowStatus.UPCOMING,
        index=True,
    )
    received_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_cashflows_amount_positive"),
        Index("ix_cashflows_investment_status", "investment_id", "status"),
    )

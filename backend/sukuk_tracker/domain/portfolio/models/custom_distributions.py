from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin
from sukuk_tracker.domain.portfolio.enums import CashflowType


class CustomDistribution(Base, IdMixin, TimestampMixin):
    """
    Investor-authored schedule line for `custom` distribution frequency.

    Maps 1:1 to the Cashflow generated from it; the pair is created and
    deleted together.
    """

    __tablename__ = "custom_distributions"

    investment_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("investments.id", ondelete="RESTRICT"), index=True)
    cashflow_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("cashflows.id", ondelete="SET NULL"), nullable=True)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    type: Mapped[CashflowType] = mapped_column(
        Enum(CashflowType, name="custom_distribution_type_enum"),
        nullable=False,
        default=CashflowType.PROFIT,
    )
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

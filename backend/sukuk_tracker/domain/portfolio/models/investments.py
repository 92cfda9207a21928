from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin
from sukuk_tracker.domain.portfolio.enums import DistributionFrequency, InvestmentStatus, ProfitPaymentStructure
from sukuk_tracker.domain.portfolio.models.custom_distributions import CustomDistribution
from sukuk_tracker.domain.portfolio.models.platforms import Platform


class Investment(Base, IdMixin, TimestampMixin):
    """
    One funded opportunity.

    `investment_number` is the human-facing sequence; it is assigned under a
    row lock at creation and never reused. `duration_months` is always derived
    from the dates (see services.duration.months_between).
    """

    __tablename__ = "investments"

    investment_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False, index=True)
    platform_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("platforms.id", ondelete="RESTRICT"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    face_value: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    total_expected_profit: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    expected_irr: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False, default=Decimal("0"))
    actual_irr: Mapped[Decimal | None] = mapped_column(Numeric(7, 2), nullable=True)

    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    actual_end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)

    distribution_frequency: Mapped[DistributionFrequency] = mapped_column(
        Enum(DistributionFrequency, name="distribution_frequency_enum"),
        nullable=False,
    )
    profit_payment_structure: Mapped[ProfitPaymentStructure] = mapped_column(
        Enum(ProfitPaymentStructure, name="profit_payment_structure_enum"),
        nullable=False,
        default=ProfitPaymentStructure.PERIODIC,
    )

    status: Mapped[InvestmentStatus] = mapped_column(
        Enum(InvestmentStatus, name="investment_status_enum"),
        nullable=False,
        default=InvestmentStatus.ACTIVE,
        index=True,
    )
    late_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    defaulted_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    funded_from_cash: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_reinvestment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=50)

    platform: Mapped[Platform] = relationship(lazy="joined", innerjoin=True)
    custom_distributions: Mapped[list[CustomDistribution]] = relationship(
        lazy="selectin",
        viewonly=True,
        order_by=CustomDistribution.due_date,
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_investments_end_after_start"),
        CheckConstraint("face_value > 0", name="ck_investments_face_value_positive"),
        CheckConstraint("total_expected_profit >= 0", name="ck_investments_profit_non_negative"),
        CheckConstraint("risk_score >= 0 AND risk_score <= 100", name="ck_investments_risk_score_range"),
    )

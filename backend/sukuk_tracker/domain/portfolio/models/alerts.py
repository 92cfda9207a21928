from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from sukuk_tracker.core.db.base import Base, IdMixin, TimestampMixin
from sukuk_tracker.domain.portfolio.enums import AlertSeverity, AlertType


class Alert(Base, IdMixin, TimestampMixin):
    """
    Payment alerts are generated for overdue or soon-due cashflows.
    At most one alert exists per cashflow.
    """

    __tablename__ = "alerts"

    investment_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("investments.id", ondelete="CASCADE"), nullable=True, index=True)
    cashflow_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("cashflows.id", ondelete="CASCADE"), nullable=True, index=True)

    type: Mapped[AlertType] = mapped_column(Enum(AlertType, name="alert_type_enum"), nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        Enum(AlertSeverity, name="alert_severity_enum"),
        nullable=False,
        default=AlertSeverity.INFO,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(String(2000), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

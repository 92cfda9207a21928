from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.portfolio.enums import AlertSeverity, AlertType, CashflowStatus
from sukuk_tracker.domain.portfolio.models.alerts import Alert
from sukuk_tracker.domain.portfolio.models.cashflows import Cashflow
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.shared.utils import utctoday

logger = get_logger(__name__)


def generate_payment_alerts(db: Session, *, today: date | None = None, days_before: int | None = None) -> list[Alert]:
    """
    Workflow loop: raise alerts for overdue and soon-due cashflows.

    Idempotency:
    - at most one alert per cashflow; cashflows that already have one are skipped
    """
    today = today or utctoday()
    days_before = settings.alert_days_before if days_before is None else days_before

    pending = db.execute(
        select(Cashflow, Investment)
        .join(Investment, Investment.id == Cashflow.investment_id)
        .where(Cashflow.status != CashflowStatus.RECEIVED)
        .order_by(Cashflow.due_date.asc())
    ).all()
    alerted = set(db.execute(select(Alert.cashflow_id).where(Alert.cashflow_id.is_not(None))).scalars().all())

    generated: list[Alert] = []
    for cf, investment in pending:
        if cf.id in alerted:
            continue

        days_until_due = (cf.due_date - today).days
        if days_until_due < 0:
            alert = Alert(
                investment_id=investment.id,
                cashflow_id=cf.id,
                type=AlertType.DISTRIBUTION,
                severity=AlertSeverity.ERROR,
                title="Late Payment Alert",
                message=f"{cf.type.value} payment for {investment.name} is overdue by {-days_until_due} days",
            )
        elif days_until_due <= days_before:
            alert = Alert(
                investment_id=investment.id,
                cashflow_id=cf.id,
                type=AlertType.DISTRIBUTION,
                severity=AlertSeverity.WARNING if days_until_due <= 3 else AlertSeverity.INFO,
                title="Upcoming Payment",
                message=f"{cf.type.value} payment for {investment.name} is due in {days_until_due} days",
            )
        else:
            continue

        db.add(alert)
        generated.append(alert)

    db.commit()
    for alert in generated:
        db.refresh(alert)

    logger.info("alerts.generated", generated_count=len(generated), days_before=days_before)
    return generated


def list_alerts(db: Session, *, unread_only: bool = False) -> list[Alert]:
    stmt = select(Alert).order_by(Alert.created_at.desc())
    if unread_only:
        stmt = stmt.where(Alert.read.is_(False))
    return list(db.execute(stmt).scalars().all())


def mark_alert_read(db: Session, *, alert_id) -> Alert | None:
    alert = db.get(Alert, alert_id)
    if alert is None:
        return None
    alert.read = True
    db.commit()
    db.refresh(alert)
    return alert

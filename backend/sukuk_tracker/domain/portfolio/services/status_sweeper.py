"""
Periodic investment status sweep.

`run_status_sweep` reads every investment with its cashflows, asks the status
manager which ones changed and commits each transition on its own, so one
failing row never blocks the rest. `StatusSweeper` runs it from an asyncio
task owned by the application lifespan.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.portfolio.models.cashflows import Cashflow
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.domain.portfolio.services.status_manager import (
    StatusDecision,
    check_all_statuses,
    status_transition_message,
)
from sukuk_tracker.shared.utils import utctoday

logger = get_logger(__name__)


@dataclass(frozen=True)
class SweepResult:
    updates_applied: int
    updates: list[StatusDecision] = field(default_factory=list)


def run_status_sweep(db: Session, *, today: date | None = None, grace_period_days: int | None = None) -> SweepResult:
    today = today or utctoday()
    grace = settings.grace_period_days if grace_period_days is None else grace_period_days

    investments = db.execute(select(Investment).order_by(Investment.investment_number.asc())).scalars().all()
    cashflows = db.execute(select(Cashflow)).scalars().all()
    by_investment: dict = {}
    for cf in cashflows:
        by_investment.setdefault(cf.investment_id, []).append(cf)

    decisions = check_all_statuses(
        ((inv, by_investment.get(inv.id, [])) for inv in investments),
        today=today,
        grace_period_days=grace,
    )
    investments_by_id = {inv.id: inv for inv in investments}

    applied: list[StatusDecision] = []
    for decision in decisions:
        investment = investments_by_id[decision.investment_id]
        previous = investment.status
        try:
            investment.status = decision.status
            investment.late_date = decision.late_date
            investment.defaulted_date = decision.defaulted_date
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("status_sweep.update_failed", investment_id=str(decision.investment_id))
            continue

        applied.append(decision)
        logger.info(
            "investment.status_changed",
            investment_id=str(decision.investment_id),
            previous_status=previous.value,
            status=decision.status.value,
            message=status_transition_message(previous, decision.status),
        )

    logger.info("status_sweep.completed", checked=len(investments), updates_applied=len(applied))
    return SweepResult(updates_applied=len(applied), updates=applied)


class StatusSweeper:
    """Runs the sweep once at start-up, then every `interval_seconds` until stopped."""

    def __init__(self, session_factory: Callable[[], Session], *, interval_seconds: float) -> None:
        self._session_factory = session_factory
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    def _sweep_once(self) -> SweepResult:
        db = self._session_factory()
        try:
            return run_status_sweep(db)
        finally:
            db.close()

    async def _loop(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self._sweep_once)
            except Exception:
                logger.exception("status_sweep.failed")
            await asyncio.sleep(self._interval_seconds)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop(), name="status-sweeper")
            logger.info("status_sweeper.started", interval_seconds=self._interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("status_sweeper.stopped")

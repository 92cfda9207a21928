from __future__ import annotations

import uuid
from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from sukuk_tracker.domain.portfolio.enums import CashflowStatus, InvestmentStatus
from sukuk_tracker.domain.portfolio.services.status_manager import (
    LateStatusOption,
    check_all_statuses,
    determine_status,
    status_transition_message,
)
from sukuk_tracker.shared.exceptions import Conflict, ValidationError

TODAY = date(2025, 3, 1)


def _investment(status=InvestmentStatus.ACTIVE, late_date=None):
    return SimpleNamespace(id=uuid.uuid4(), status=status, late_date=late_date, defaulted_date=None)


def _cf(due, status=CashflowStatus.EXPECTED):
    return SimpleNamespace(due_date=due, status=status)


def test_all_received_is_completed():
    decision = determine_status(
        _investment(InvestmentStatus.LATE, late_date=date(2025, 1, 1)),
        [_cf(date(2025, 1, 1), CashflowStatus.RECEIVED), _cf(date(2025, 2, 1), CashflowStatus.RECEIVED)],
        today=TODAY,
    )
    assert decision.status == InvestmentStatus.COMPLETED
    assert decision.late_date is None
    assert decision.defaulted_date is None


def test_nothing_overdue_is_active():
    decision = determine_status(_investment(), [_cf(TODAY), _cf(TODAY + timedelta(days=30))], today=TODAY)
    assert decision.status == InvestmentStatus.ACTIVE
    assert decision.late_date is None


def test_no_cashflows_is_active():
    assert determine_status(_investment(), [], today=TODAY).status == InvestmentStatus.ACTIVE


def test_overdue_within_grace_is_late():
    due = TODAY - timedelta(days=10)
    decision = determine_status(_investment(), [_cf(due)], today=TODAY)
    assert decision.status == InvestmentStatus.LATE
    assert decision.late_date == due
    assert decision.defaulted_date is None


def test_exactly_grace_period_is_still_late():
    decision = determine_status(_investment(), [_cf(TODAY - timedelta(days=30))], today=TODAY)
    assert decision.status == InvestmentStatus.LATE


def test_past_grace_period_is_defaulted_and_keeps_late_date():
    oldest = TODAY - timedelta(days=45)
    existing_late = TODAY - timedelta(days=40)
    decision = determine_status(
        _investment(InvestmentStatus.LATE, late_date=existing_late),
        [_cf(TODAY - timedelta(days=5)), _cf(oldest)],
        today=TODAY,
    )
    assert decision.status == InvestmentStatus.DEFAULTED
    assert decision.late_date == existing_late
    assert decision.defaulted_date == oldest + timedelta(days=30)


def test_check_all_statuses_skips_pending_and_unchanged():
    overdue = [_cf(TODAY - timedelta(days=3))]
    pending = _investment(InvestmentStatus.PENDING)
    already_late = _investment(InvestmentStatus.LATE, late_date=TODAY - timedelta(days=3))
    active = _investment()

    updates = check_all_statuses(
        [(pending, overdue), (already_late, overdue), (active, overdue)],
        today=TODAY,
    )
    assert [u.investment_id for u in updates] == [active.id]
    assert updates[0].status == InvestmentStatus.LATE


def test_status_transition_message():
    assert "late" in status_transition_message(InvestmentStatus.ACTIVE, InvestmentStatus.LATE)
    assert status_transition_message(InvestmentStatus.PENDING, InvestmentStatus.ACTIVE) == (
        "Status changed from pending to active"
    )


def test_late_option_rejects_contradictory_request():
    with pytest.raises(Conflict):
        LateStatusOption.from_request(clear_late_status=True, late_days=3)
    with pytest.raises(ValidationError):
        LateStatusOption.from_request(late_days=0)


def test_late_option_backdates_late_date():
    option = LateStatusOption.from_request(late_days=5)
    assert option.late_date_for(TODAY) == TODAY - timedelta(days=5)
    assert LateStatusOption().late_date_for(TODAY) is None


def test_two_received_one_overdue_is_late_and_decision_is_stable():
    inv = _investment()
    due = TODAY - timedelta(days=10)
    cashflows = [
        _cf(date(2024, 12, 1), CashflowStatus.RECEIVED),
        _cf(date(2025, 1, 1), CashflowStatus.RECEIVED),
        _cf(due),
    ]

    first = determine_status(inv, cashflows, today=TODAY)
    second = determine_status(inv, cashflows, today=TODAY)

    assert first == second
    assert first.status == InvestmentStatus.LATE
    assert first.late_date == due
    assert first.defaulted_date is None

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from sukuk_tracker.domain.cash_management.enums import CashTransactionSource, CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.portfolio.enums import CashflowStatus, InvestmentStatus
from sukuk_tracker.domain.portfolio.services.cashflows import list_cashflows
from sukuk_tracker.domain.portfolio.services.completion import complete_all_payments
from sukuk_tracker.domain.portfolio.services.status_manager import LateStatusOption
from sukuk_tracker.shared.exceptions import Conflict

TODAY = date(2025, 3, 1)


def _ledger_count(db) -> int:
    return db.execute(select(func.count()).select_from(CashTransaction)).scalar_one()


def _mark_late(db, inv, *, status=InvestmentStatus.LATE, late_date=date(2024, 4, 15), defaulted_date=None):
    inv.status = status
    inv.late_date = late_date
    inv.defaulted_date = defaulted_date
    db.commit()


def test_complete_all_payments_credits_each_cashflow_once(db_session, make_investment):
    inv = make_investment()

    result = complete_all_payments(db_session, investment_id=inv.id, received_date=date(2025, 2, 1), today=TODAY)

    assert result.updated_count == 5
    assert result.total_amount == Decimal("11200.00")
    cashflows = list_cashflows(db_session, investment_id=inv.id)
    assert all(cf.status == CashflowStatus.RECEIVED for cf in cashflows)
    assert all(cf.received_date == date(2025, 2, 1) for cf in cashflows)

    entries = db_session.execute(select(CashTransaction)).scalars().all()
    assert len(entries) == 5
    assert {e.cashflow_id for e in entries} == {cf.id for cf in cashflows}
    assert all(e.type == CashTransactionType.DISTRIBUTION for e in entries)
    assert sorted(e.source for e in entries) == sorted(
        [CashTransactionSource.PROFIT.value] * 4 + [CashTransactionSource.INVESTMENT_RETURN.value]
    )
    db_session.refresh(inv)
    assert inv.status == InvestmentStatus.COMPLETED


def test_completing_twice_is_rejected_without_ledger_writes(db_session, make_investment):
    inv = make_investment()
    complete_all_payments(db_session, investment_id=inv.id, today=TODAY)
    before = _ledger_count(db_session)

    with pytest.raises(Conflict):
        complete_all_payments(db_session, investment_id=inv.id, today=TODAY)

    assert _ledger_count(db_session) == before


def test_due_date_mode_on_completed_investment_only_clears_stale_dates(db_session, make_investment):
    inv = make_investment()
    complete_all_payments(db_session, investment_id=inv.id, use_due_dates=True, today=TODAY)
    _mark_late(db_session, inv, status=InvestmentStatus.COMPLETED)
    before = _ledger_count(db_session)

    result = complete_all_payments(db_session, investment_id=inv.id, use_due_dates=True, today=TODAY)

    assert result.updated_count == 0
    assert result.total_amount == Decimal("0")
    assert _ledger_count(db_session) == before
    db_session.refresh(inv)
    assert inv.status == InvestmentStatus.COMPLETED
    assert inv.late_date is None


def test_due_date_mode_receives_on_each_due_date(db_session, make_investment):
    inv = make_investment()
    complete_all_payments(db_session, investment_id=inv.id, use_due_dates=True, today=TODAY)
    for cf in list_cashflows(db_session, investment_id=inv.id):
        assert cf.received_date == cf.due_date
    entry_dates = {e.date for e in db_session.execute(select(CashTransaction)).scalars()}
    assert date(2024, 4, 15) in entry_dates


def test_pending_investment_is_rejected(db_session, make_investment):
    inv = make_investment(status=InvestmentStatus.PENDING)
    with pytest.raises(Conflict):
        complete_all_payments(db_session, investment_id=inv.id, today=TODAY)
    assert _ledger_count(db_session) == 0


def test_existing_ledger_entry_is_not_duplicated(db_session, make_investment):
    inv = make_investment()
    first = list_cashflows(db_session, investment_id=inv.id)[0]
    db_session.add(
        CashTransaction(
            type=CashTransactionType.DISTRIBUTION,
            amount=first.amount,
            date=first.due_date,
            investment_id=inv.id,
            cashflow_id=first.id,
        )
    )
    db_session.commit()

    complete_all_payments(db_session, investment_id=inv.id, today=TODAY)

    assert _ledger_count(db_session) == 5


def test_late_investment_clear_option_clears_dates(db_session, make_investment):
    inv = make_investment()
    _mark_late(db_session, inv, status=InvestmentStatus.DEFAULTED, defaulted_date=date(2024, 5, 15))

    complete_all_payments(
        db_session,
        investment_id=inv.id,
        late_option=LateStatusOption.from_request(clear_late_status=True),
        today=TODAY,
    )

    db_session.refresh(inv)
    assert inv.status == InvestmentStatus.COMPLETED
    assert inv.late_date is None
    assert inv.defaulted_date is None


def test_late_investment_extend_option_backdates_late_date(db_session, make_investment):
    inv = make_investment()
    _mark_late(db_session, inv)

    complete_all_payments(
        db_session,
        investment_id=inv.id,
        late_option=LateStatusOption.from_request(late_days=10),
        today=TODAY,
    )

    db_session.refresh(inv)
    assert inv.status == InvestmentStatus.COMPLETED
    assert inv.late_date == TODAY - timedelta(days=10)


def test_late_investment_without_option_keeps_dates(db_session, make_investment):
    inv = make_investment()
    _mark_late(db_session, inv)

    complete_all_payments(db_session, investment_id=inv.id, today=TODAY)

    db_session.refresh(inv)
    assert inv.status == InvestmentStatus.COMPLETED
    assert inv.late_date == date(2024, 4, 15)

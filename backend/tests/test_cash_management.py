from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.schemas import CashTransactionCreate
from sukuk_tracker.domain.cash_management.service import create_transaction, list_transactions
from sukuk_tracker.domain.cash_management.services.ledger import get_cash_balance
from sukuk_tracker.shared.exceptions import InsufficientFunds, ValidationError


def _tx(type_, amount, platform_id=None):
    return CashTransactionCreate(type=type_, amount=Decimal(amount), date=date(2024, 3, 1), platform_id=platform_id)


def test_deposit_then_withdraw_within_platform_balance(db_session, platform):
    create_transaction(db_session, payload=_tx(CashTransactionType.DEPOSIT, "1000", platform.id))
    create_transaction(db_session, payload=_tx(CashTransactionType.WITHDRAWAL, "400", platform.id))

    balance = get_cash_balance(db_session)
    assert balance.total == Decimal("600.00")
    assert balance.by_platform[platform.id] == Decimal("600.00")
    assert len(list_transactions(db_session, platform_id=platform.id)) == 2


def test_withdrawal_larger_than_balance_is_rejected(db_session, platform):
    create_transaction(db_session, payload=_tx(CashTransactionType.DEPOSIT, "100", platform.id))

    with pytest.raises(InsufficientFunds) as exc:
        create_transaction(db_session, payload=_tx(CashTransactionType.WITHDRAWAL, "100.01", platform.id))

    assert exc.value.available == Decimal("100.00")
    assert len(list_transactions(db_session)) == 1


def test_unscoped_withdrawal_checks_whole_pool(db_session, platform):
    create_transaction(db_session, payload=_tx(CashTransactionType.DEPOSIT, "100", platform.id))
    create_transaction(db_session, payload=_tx(CashTransactionType.TRANSFER, "60"))

    with pytest.raises(InsufficientFunds):
        create_transaction(db_session, payload=_tx(CashTransactionType.WITHDRAWAL, "41"))


def test_portfolio_only_types_are_rejected(db_session):
    with pytest.raises(ValidationError):
        create_transaction(db_session, payload=_tx(CashTransactionType.DISTRIBUTION, "10"))

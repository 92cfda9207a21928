from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.cash_management.services.ledger import (
    LedgerRow,
    calculate_balance,
    get_cash_balance,
    lock_platform_entries,
    locked_balance,
    signed_amount,
)
from sukuk_tracker.domain.portfolio.models.platforms import Platform


@pytest.mark.parametrize(
    ("tx_type", "expected"),
    [
        (CashTransactionType.DEPOSIT, Decimal("100")),
        (CashTransactionType.DISTRIBUTION, Decimal("100")),
        (CashTransactionType.WITHDRAWAL, Decimal("-100")),
        (CashTransactionType.INVESTMENT, Decimal("-100")),
        (CashTransactionType.TRANSFER, Decimal("-100")),
    ],
)
def test_signed_amount(tx_type, expected):
    assert signed_amount(tx_type, Decimal("100")) == expected


def test_calculate_balance_attributes_platform_from_entry_or_investment():
    p1, p2 = uuid.uuid4(), uuid.uuid4()
    balance = calculate_balance(
        [
            LedgerRow(CashTransactionType.DEPOSIT, Decimal("1000"), platform_id=p1),
            LedgerRow(CashTransactionType.INVESTMENT, Decimal("400"), platform_id=p1),
            LedgerRow(CashTransactionType.DISTRIBUTION, Decimal("50"), investment_platform_id=p2),
            LedgerRow(CashTransactionType.DEPOSIT, Decimal("25")),
        ]
    )
    assert balance.total == Decimal("675")
    assert balance.by_platform == {p1: Decimal("600"), p2: Decimal("50")}


def test_lock_platform_entries_covers_platform_partition(db_session, platform, deposit, make_investment):
    other = Platform(name="Manfaa", type="manfaa")
    db_session.add(other)
    db_session.commit()

    deposit(platform.id, "20000")
    deposit(other.id, "500")
    make_investment(funded_from_cash=True)
    # Untagged entry linked to an investment on the platform still belongs to it.
    inv = make_investment(name="Second")
    db_session.add(
        CashTransaction(type=CashTransactionType.DISTRIBUTION, amount=Decimal("75"), date=date(2024, 2, 1), investment_id=inv.id)
    )
    db_session.commit()

    entries = lock_platform_entries(db_session, platform_id=platform.id)
    assert len(entries) == 3
    assert locked_balance(entries) == Decimal("10075.00")

    balance = get_cash_balance(db_session)
    assert balance.total == Decimal("10575.00")
    assert balance.by_platform[platform.id] == Decimal("10075.00")
    assert balance.by_platform[other.id] == Decimal("500.00")

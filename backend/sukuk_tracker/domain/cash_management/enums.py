from __future__ import annotations

from enum import Enum


class CashTransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    INVESTMENT = "investment"
    DISTRIBUTION = "distribution"
    TRANSFER = "transfer"


class CashTransactionSource(str, Enum):
    DEPOSIT = "deposit"
    TRANSFER = "transfer"
    PROFIT = "profit"
    INVESTMENT_RETURN = "investment_return"

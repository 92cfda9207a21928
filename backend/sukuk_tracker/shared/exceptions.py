from __future__ import annotations

from decimal import Decimal


class AppError(Exception):
    """Base error for domain/application exceptions."""


class NotFound(AppError):
    """Raised when an investment, cashflow or platform does not exist."""


class ValidationError(AppError):
    """Raised for domain-level validation beyond schema validation."""


class Conflict(AppError):
    """Raised when a request contradicts the current state (e.g. completing twice)."""


class InsufficientFunds(AppError):
    """Raised inside a locked unit of work when the cash pool cannot cover a debit."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Insufficient cash balance: required {required}, available {available}")

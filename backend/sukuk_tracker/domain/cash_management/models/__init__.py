from __future__ import annotations

from sukuk_tracker.domain.cash_management.models.cash import CashTransaction

__all__ = [
    "CashTransaction",
]

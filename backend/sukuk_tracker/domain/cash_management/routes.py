from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.cash_management.schemas import CashBalanceOut, CashTransactionCreate, CashTransactionOut
from sukuk_tracker.domain.cash_management.service import create_transaction, list_transactions
from sukuk_tracker.domain.cash_management.services.ledger import get_cash_balance


router = APIRouter(prefix="/cash", tags=["Cash Management"])


@router.get("/balance", response_model=CashBalanceOut)
def balance(db: Session = Depends(get_db)):
    result = get_cash_balance(db)
    return CashBalanceOut(total=result.total, by_platform=result.by_platform)


@router.get("/transactions", response_model=list[CashTransactionOut])
def get_transactions(platform_id: uuid.UUID | None = None, db: Session = Depends(get_db)):
    return list_transactions(db, platform_id=platform_id)


@router.post("/transactions", response_model=CashTransactionOut, status_code=status.HTTP_201_CREATED)
def post_transaction(payload: CashTransactionCreate, db: Session = Depends(get_db)):
    return create_transaction(db, payload=payload)

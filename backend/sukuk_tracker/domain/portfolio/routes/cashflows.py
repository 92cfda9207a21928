from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.portfolio.schemas.cashflows import CashflowCreate, CashflowOut, CashflowUpdate
from sukuk_tracker.domain.portfolio.services import cashflows as service


router = APIRouter(prefix="/cashflows", tags=["Cashflows"])


@router.get("", response_model=list[CashflowOut])
def list_cashflows(investment_id: uuid.UUID | None = None, db: Session = Depends(get_db)):
    return service.list_cashflows(db, investment_id=investment_id)


@router.post("", response_model=CashflowOut, status_code=status.HTTP_201_CREATED)
def create_cashflow(payload: CashflowCreate, db: Session = Depends(get_db)):
    return service.create_cashflow(db, payload=payload)


@router.patch("/{cashflow_id}", response_model=CashflowOut)
def update_cashflow(cashflow_id: uuid.UUID, payload: CashflowUpdate, db: Session = Depends(get_db)):
    return service.update_cashflow(db, cashflow_id=cashflow_id, payload=payload)


@router.delete("/{cashflow_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cashflow(cashflow_id: uuid.UUID, db: Session = Depends(get_db)) -> None:
    service.delete_cashflow(db, cashflow_id=cashflow_id)

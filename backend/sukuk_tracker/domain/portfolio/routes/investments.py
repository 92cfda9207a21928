from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.domain.portfolio.schemas.cashflows import CashflowOut
from sukuk_tracker.domain.portfolio.schemas.investments import (
    BulkCompleteRequest,
    CashflowPreviewRequest,
    CompletionResultOut,
    GeneratedCashflowOut,
    InvestmentCreate,
    InvestmentOut,
    InvestmentUpdate,
    SweepResultOut,
)
from sukuk_tracker.domain.portfolio.services import investments as service
from sukuk_tracker.domain.portfolio.services.cashflows import list_cashflows
from sukuk_tracker.domain.portfolio.services.completion import complete_all_payments
from sukuk_tracker.domain.portfolio.services.status_manager import LateStatusOption
from sukuk_tracker.domain.portfolio.services.status_sweeper import run_status_sweep


router = APIRouter(prefix="/investments", tags=["Investments"])


@router.get("", response_model=list[InvestmentOut])
def list_investments(db: Session = Depends(get_db)):
    return service.list_investments(db)


@router.post("", response_model=InvestmentOut, status_code=status.HTTP_201_CREATED)
def create_investment(payload: InvestmentCreate, db: Session = Depends(get_db)):
    return service.create_investment(db, payload=payload)


@router.post("/preview-cashflows", response_model=list[GeneratedCashflowOut])
def preview_cashflows(payload: CashflowPreviewRequest):
    return service.preview_cashflows(payload)


@router.post("/check-status", response_model=SweepResultOut)
def check_status(db: Session = Depends(get_db)):
    return run_status_sweep(db)


@router.get("/{investment_id}", response_model=InvestmentOut)
def get_investment(investment_id: uuid.UUID, db: Session = Depends(get_db)):
    return service.get_investment(db, investment_id=investment_id)


@router.patch("/{investment_id}", response_model=InvestmentOut)
def update_investment(investment_id: uuid.UUID, payload: InvestmentUpdate, db: Session = Depends(get_db)):
    return service.update_investment(db, investment_id=investment_id, payload=payload)


@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_investment(investment_id: uuid.UUID, db: Session = Depends(get_db)) -> None:
    service.delete_investment(db, investment_id=investment_id)


@router.get("/{investment_id}/cashflows", response_model=list[CashflowOut])
def investment_cashflows(investment_id: uuid.UUID, db: Session = Depends(get_db)):
    service.get_investment(db, investment_id=investment_id)
    return list_cashflows(db, investment_id=investment_id)


@router.post("/{investment_id}/complete-all-payments", response_model=CompletionResultOut)
def complete_payments(investment_id: uuid.UUID, payload: BulkCompleteRequest, db: Session = Depends(get_db)):
    late_days = payload.update_late_info.late_days if payload.update_late_info else None
    option = LateStatusOption.from_request(clear_late_status=payload.clear_late_status, late_days=late_days)
    return complete_all_payments(
        db,
        investment_id=investment_id,
        received_date=payload.received_date,
        use_due_dates=payload.use_due_dates,
        late_option=option,
    )

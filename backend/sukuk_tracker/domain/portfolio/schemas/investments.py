from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from sukuk_tracker.domain.portfolio.enums import (
    CashflowType,
    DistributionFrequency,
    InvestmentStatus,
    ProfitPaymentStructure,
)
from sukuk_tracker.domain.portfolio.schemas.platforms import PlatformOut


class CustomDistributionIn(BaseModel):
    due_date: date
    amount: Decimal
    type: CashflowType = CashflowType.PROFIT
    notes: str | None = Field(default=None, max_length=1000)


class CustomDistributionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    cashflow_id: uuid.UUID | None
    due_date: date
    amount: Decimal
    type: CashflowType
    notes: str | None


class InvestmentCreate(BaseModel):
    platform_id: uuid.UUID
    name: str = Field(min_length=1, max_length=255)
    face_value: Decimal
    total_expected_profit: Decimal | None = None
    expected_irr: Decimal = Decimal("0")
    start_date: date
    end_date: date | None = None
    duration_months: int | None = Field(default=None, gt=0)
    actual_end_date: date | None = None
    distribution_frequency: DistributionFrequency
    profit_payment_structure: ProfitPaymentStructure = ProfitPaymentStructure.PERIODIC
    status: InvestmentStatus = InvestmentStatus.ACTIVE
    funded_from_cash: bool = False
    is_reinvestment: bool = False
    risk_score: int = Field(default=50, ge=0, le=100)
    custom_distributions: list[CustomDistributionIn] | None = None


class InvestmentUpdate(BaseModel):
    """
    Partial update. `custom_distributions` left out keeps the schedule; sent
    as [] or null it clears custom lines and regenerates; sent with items it
    replaces them. Received cashflows are never touched.
    """

    platform_id: uuid.UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    face_value: Decimal | None = None
    total_expected_profit: Decimal | None = None
    expected_irr: Decimal | None = None
    start_date: date | None = None
    end_date: date | None = None
    duration_months: int | None = Field(default=None, gt=0)
    actual_end_date: date | None = None
    distribution_frequency: DistributionFrequency | None = None
    profit_payment_structure: ProfitPaymentStructure | None = None
    status: InvestmentStatus | None = None
    is_reinvestment: bool | None = None
    risk_score: int | None = Field(default=None, ge=0, le=100)
    custom_distributions: list[CustomDistributionIn] | None = None


class InvestmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    investment_number: int
    platform_id: uuid.UUID
    platform: PlatformOut | None = None
    name: str
    face_value: Decimal
    total_expected_profit: Decimal
    expected_irr: Decimal
    actual_irr: Decimal | None
    start_date: date
    end_date: date
    actual_end_date: date | None
    duration_months: int
    distribution_frequency: DistributionFrequency
    profit_payment_structure: ProfitPaymentStructure
    status: InvestmentStatus
    late_date: date | None
    defaulted_date: date | None
    funded_from_cash: bool
    is_reinvestment: bool
    risk_score: int
    custom_distributions: list[CustomDistributionOut] = Field(default_factory=list)


class CashflowPreviewRequest(BaseModel):
    start_date: date
    end_date: date
    face_value: Decimal = Field(gt=0)
    total_expected_profit: Decimal = Field(ge=0)
    distribution_frequency: DistributionFrequency
    profit_payment_structure: ProfitPaymentStructure = ProfitPaymentStructure.PERIODIC


class GeneratedCashflowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    due_date: date
    amount: Decimal
    type: CashflowType


class LateDaysUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    late_days: int = Field(ge=1)


class BulkCompleteRequest(BaseModel):
    received_date: date | None = None
    use_due_dates: bool = False
    clear_late_status: bool = False
    update_late_info: LateDaysUpdate | None = None


class CompletionResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    updated_count: int
    total_amount: Decimal


class StatusUpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    investment_id: uuid.UUID
    status: InvestmentStatus
    late_date: date | None
    defaulted_date: date | None


class SweepResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    updates_applied: int
    updates: list[StatusUpdateOut]

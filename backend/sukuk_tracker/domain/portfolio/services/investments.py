"""
Investment transaction coordinator.

Creates, updates and deletes an investment together with its cashflow
schedule and the cash-pool entries it implies. Each public function is one
unit of work: it commits everything or rolls everything back.

Locking order on create: platform ledger entries (balance decision), then
the row holding the current maximum investment number.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from sukuk_tracker.core.logging import get_logger
from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.cash_management.services.ledger import lock_platform_entries, locked_balance
from sukuk_tracker.domain.portfolio.enums import CashflowStatus, DistributionFrequency, InvestmentStatus
from sukuk_tracker.domain.portfolio.models.alerts import Alert
from sukuk_tracker.domain.portfolio.models.cashflows import Cashflow
from sukuk_tracker.domain.portfolio.models.custom_distributions import CustomDistribution
from sukuk_tracker.domain.portfolio.models.investments import Investment
from sukuk_tracker.domain.portfolio.models.platforms import Platform
from sukuk_tracker.domain.portfolio.schemas.investments import (
    CashflowPreviewRequest,
    CustomDistributionIn,
    InvestmentCreate,
    InvestmentUpdate,
)
from sukuk_tracker.domain.portfolio.services.cashflows import detach_ledger_entry
from sukuk_tracker.domain.portfolio.services.duration import resolve_financials
from sukuk_tracker.domain.portfolio.services.schedule import GeneratedCashflow, degenerate_schedule, generate_cashflows
from sukuk_tracker.shared.exceptions import InsufficientFunds, NotFound, ValidationError
from sukuk_tracker.shared.utils import sa_model_to_dict, to_money

logger = get_logger(__name__)


# Custom distribution change on update: left alone, cleared, or replaced.
@dataclass(frozen=True)
class NotProvided:
    pass


@dataclass(frozen=True)
class Cleared:
    pass


@dataclass(frozen=True)
class Replaced:
    distributions: tuple[CustomDistributionIn, ...]


DistributionChange = NotProvided | Cleared | Replaced


def distribution_change(payload: InvestmentUpdate) -> DistributionChange:
    if "custom_distributions" not in payload.model_fields_set:
        return NotProvided()
    if not payload.custom_distributions:
        return Cleared()
    return Replaced(tuple(payload.custom_distributions))


_FINANCIAL_FIELDS = frozenset(
    {"face_value", "expected_irr", "start_date", "end_date", "duration_months", "total_expected_profit"}
)

# Later statuses are reached only through the status sweep or bulk completion.
_INITIAL_STATUSES = frozenset({InvestmentStatus.ACTIVE, InvestmentStatus.PENDING})


def _check_distribution_amounts(distributions: Sequence[CustomDistributionIn]) -> None:
    for idx, dist in enumerate(distributions):
        if dist.amount is None or dist.amount <= 0:
            raise ValidationError(f"custom_distributions[{idx}].amount must be positive")


def validate_custom_distributions(distributions: Sequence[CustomDistributionIn], *, start_date, end_date) -> None:
    _check_distribution_amounts(distributions)
    for idx, dist in enumerate(distributions):
        if dist.due_date < start_date or dist.due_date > end_date:
            raise ValidationError(f"custom_distributions[{idx}].due_date must be within the investment period")


def _check_update_request(fields: dict, change: DistributionChange) -> None:
    """Checks an update request can fail without the stored row."""
    if fields.get("status") is not None and fields["status"] != InvestmentStatus.ACTIVE:
        raise ValidationError("status can only be set to 'active', to confirm funding of a pending investment")
    if fields.get("face_value") is not None and fields["face_value"] <= 0:
        raise ValidationError("face_value must be positive")
    if fields.get("expected_irr") is not None and fields["expected_irr"] < 0:
        raise ValidationError("expected_irr must not be negative")
    if fields.get("total_expected_profit") is not None and fields["total_expected_profit"] < 0:
        raise ValidationError("total_expected_profit must not be negative")
    if fields.get("start_date") and fields.get("end_date") and fields["end_date"] <= fields["start_date"]:
        raise ValidationError("end_date must be after start_date")
    if fields.get("distribution_frequency") == DistributionFrequency.CUSTOM and not isinstance(change, Replaced):
        raise ValidationError("Custom distribution schedule is required when changing frequency to 'custom'")
    if isinstance(change, Replaced):
        _check_distribution_amounts(change.distributions)


def standard_schedule(investment: Investment) -> list[GeneratedCashflow]:
    if investment.end_date <= investment.start_date:
        return degenerate_schedule(
            end_date=investment.end_date,
            face_value=investment.face_value,
            total_expected_profit=investment.total_expected_profit,
        )
    return generate_cashflows(
        start_date=investment.start_date,
        end_date=investment.end_date,
        face_value=investment.face_value,
        total_expected_profit=investment.total_expected_profit,
        frequency=investment.distribution_frequency,
        structure=investment.profit_payment_structure,
    )


def _install_schedule(
    db: Session,
    investment: Investment,
    distributions: Sequence[CustomDistributionIn] | None,
    *,
    keep: Sequence[Cashflow] = (),
) -> int:
    """Insert custom or generated cashflows (status expected). Returns how many were added."""
    added = 0
    if distributions:
        for dist in distributions:
            cf = Cashflow(
                investment_id=investment.id,
                due_date=dist.due_date,
                amount=to_money(dist.amount),
                type=dist.type,
                status=CashflowStatus.EXPECTED,
            )
            db.add(cf)
            db.flush()
            db.add(
                CustomDistribution(
                    investment_id=investment.id,
                    cashflow_id=cf.id,
                    due_date=dist.due_date,
                    amount=to_money(dist.amount),
                    type=dist.type,
                    notes=dist.notes,
                )
            )
            added += 1
    else:
        already_received = {(cf.due_date, cf.type) for cf in keep}
        for generated in standard_schedule(investment):
            if (generated.due_date, generated.type) in already_received:
                continue
            db.add(
                Cashflow(
                    investment_id=investment.id,
                    due_date=generated.due_date,
                    amount=generated.amount,
                    type=generated.type,
                    status=CashflowStatus.EXPECTED,
                )
            )
            added += 1
    db.flush()
    return added


def _next_investment_number(db: Session) -> int:
    # FOR UPDATE cannot wrap an aggregate, so lock the row holding the maximum.
    current_max = db.execute(
        select(Investment.investment_number)
        .order_by(Investment.investment_number.desc())
        .limit(1)
        .with_for_update()
    ).scalar_one_or_none()
    return (current_max or 0) + 1


def _funding_entry(db: Session, investment_id: uuid.UUID) -> CashTransaction | None:
    return db.execute(
        select(CashTransaction)
        .where(
            CashTransaction.investment_id == investment_id,
            CashTransaction.type == CashTransactionType.INVESTMENT,
            CashTransaction.cashflow_id.is_(None),
        )
        .with_for_update()
    ).scalar_one_or_none()


def _require_platform(db: Session, platform_id: uuid.UUID) -> Platform:
    platform = db.get(Platform, platform_id)
    if platform is None:
        raise NotFound("Platform not found")
    return platform


def list_investments(db: Session) -> list[Investment]:
    return list(db.execute(select(Investment).order_by(Investment.investment_number.asc())).scalars().all())


def get_investment(db: Session, *, investment_id: uuid.UUID) -> Investment:
    investment = db.get(Investment, investment_id)
    if investment is None:
        raise NotFound("Investment not found")
    return investment


def create_investment(db: Session, *, payload: InvestmentCreate) -> Investment:
    """
    Create an investment, its schedule and (when cash-funded) the funding debit.

    Validation happens before any lock. The platform partition's ledger rows
    are locked before the balance is read so two concurrent creations cannot
    both spend the same cash.
    """
    if payload.status not in _INITIAL_STATUSES:
        raise ValidationError("A new investment starts as 'active' or 'pending'")
    financials = resolve_financials(
        face_value=payload.face_value,
        expected_irr=payload.expected_irr,
        start_date=payload.start_date,
        end_date=payload.end_date,
        duration_months=payload.duration_months,
        total_expected_profit=payload.total_expected_profit,
    )
    if payload.distribution_frequency == DistributionFrequency.CUSTOM and not payload.custom_distributions:
        raise ValidationError("Custom distribution schedule is required when frequency is 'custom'")
    if payload.custom_distributions:
        validate_custom_distributions(
            payload.custom_distributions,
            start_date=financials.start_date,
            end_date=financials.end_date,
        )

    try:
        _require_platform(db, payload.platform_id)

        if payload.funded_from_cash:
            entries = lock_platform_entries(db, platform_id=payload.platform_id)
            available = locked_balance(entries)
            if available < financials.face_value:
                raise InsufficientFunds(required=financials.face_value, available=available)

        number = _next_investment_number(db)
        investment = Investment(
            investment_number=number,
            platform_id=payload.platform_id,
            name=payload.name,
            face_value=financials.face_value,
            total_expected_profit=financials.total_expected_profit,
            expected_irr=financials.expected_irr,
            start_date=financials.start_date,
            end_date=financials.end_date,
            actual_end_date=payload.actual_end_date,
            duration_months=financials.duration_months,
            distribution_frequency=payload.distribution_frequency,
            profit_payment_structure=payload.profit_payment_structure,
            status=payload.status,
            funded_from_cash=payload.funded_from_cash,
            is_reinvestment=payload.is_reinvestment,
            risk_score=payload.risk_score,
        )
        db.add(investment)
        db.flush()

        if payload.funded_from_cash:
            db.add(
                CashTransaction(
                    type=CashTransactionType.INVESTMENT,
                    amount=financials.face_value,
                    date=financials.start_date,
                    investment_id=investment.id,
                    platform_id=payload.platform_id,
                    notes=f"Funding for investment #{number} ({payload.name})",
                )
            )

        cashflow_count = _install_schedule(db, investment, payload.custom_distributions)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(investment)
    logger.info(
        "investment.created",
        investment_id=str(investment.id),
        investment_number=investment.investment_number,
        platform_id=str(investment.platform_id),
        face_value=str(investment.face_value),
        funded_from_cash=investment.funded_from_cash,
        cashflows=cashflow_count,
    )
    return investment


def _rebalance_funding(db: Session, investment: Investment, *, platform_id: uuid.UUID, face_value: Decimal) -> None:
    """Move or resize the funding debit of a cash-funded investment, under lock."""
    funding = _funding_entry(db, investment.id)
    entries = lock_platform_entries(db, platform_id=platform_id)
    available = locked_balance(entries)
    if funding is not None and any(e.id == funding.id for e in entries):
        # The current debit is already counted; give it back before re-checking.
        available += funding.amount
    if available < face_value:
        raise InsufficientFunds(required=face_value, available=available)

    if funding is None:
        db.add(
            CashTransaction(
                type=CashTransactionType.INVESTMENT,
                amount=face_value,
                date=investment.start_date,
                investment_id=investment.id,
                platform_id=platform_id,
                notes=f"Funding for investment #{investment.investment_number} ({investment.name})",
            )
        )
    else:
        funding.amount = face_value
        funding.platform_id = platform_id
        funding.date = investment.start_date


def update_investment(db: Session, *, investment_id: uuid.UUID, payload: InvestmentUpdate) -> Investment:
    """
    Partial update.

    Financial fields are re-resolved together so duration never drifts from
    the dates. When custom distributions are part of the request, the open
    (non-received) schedule is replaced; received history is never deleted.

    Request-only checks run before the lock. Checks that depend on stored
    values (merged dates, stored frequency, current status) run after it.
    """
    change = distribution_change(payload)
    fields = payload.model_dump(exclude_unset=True, exclude={"custom_distributions"})
    _check_update_request(fields, change)

    try:
        investment = db.execute(
            select(Investment).where(Investment.id == investment_id).with_for_update(of=Investment)
        ).scalar_one_or_none()
        if investment is None:
            raise NotFound("Investment not found")

        old_platform_id = investment.platform_id
        old_face_value = investment.face_value

        if fields.keys() & _FINANCIAL_FIELDS:
            if fields.get("end_date") is not None:
                end_date = fields["end_date"]
            elif fields.get("duration_months"):
                end_date = None
            else:
                end_date = investment.end_date
            financials = resolve_financials(
                face_value=fields.get("face_value") or investment.face_value,
                expected_irr=fields["expected_irr"] if fields.get("expected_irr") is not None else investment.expected_irr,
                start_date=fields.get("start_date") or investment.start_date,
                end_date=end_date,
                duration_months=fields.get("duration_months"),
                total_expected_profit=(
                    fields["total_expected_profit"]
                    if "total_expected_profit" in fields
                    else investment.total_expected_profit
                ),
            )
            investment.face_value = financials.face_value
            investment.expected_irr = financials.expected_irr
            investment.start_date = financials.start_date
            investment.end_date = financials.end_date
            investment.duration_months = financials.duration_months
            investment.total_expected_profit = financials.total_expected_profit

        for key in (
            "name",
            "actual_end_date",
            "distribution_frequency",
            "profit_payment_structure",
            "is_reinvestment",
            "risk_score",
        ):
            if key in fields and (fields[key] is not None or key == "actual_end_date"):
                setattr(investment, key, fields[key])

        if fields.get("status") is not None and fields["status"] != investment.status:
            if investment.status != InvestmentStatus.PENDING:
                raise ValidationError(f"Only a pending investment can be confirmed; status is '{investment.status.value}'")
            investment.status = InvestmentStatus.ACTIVE

        if fields.get("platform_id") is not None and fields["platform_id"] != old_platform_id:
            _require_platform(db, fields["platform_id"])
            investment.platform_id = fields["platform_id"]

        if investment.distribution_frequency == DistributionFrequency.CUSTOM and isinstance(change, Cleared):
            raise ValidationError("Custom distribution schedule is required when frequency is 'custom'")
        if isinstance(change, Replaced):
            validate_custom_distributions(
                change.distributions,
                start_date=investment.start_date,
                end_date=investment.end_date,
            )

        if investment.funded_from_cash and (
            investment.platform_id != old_platform_id or investment.face_value != old_face_value
        ):
            _rebalance_funding(db, investment, platform_id=investment.platform_id, face_value=investment.face_value)

        db.flush()

        if not isinstance(change, NotProvided):
            _replace_open_schedule(db, investment, change)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(investment)
    logger.info(
        "investment.updated",
        investment_id=str(investment.id),
        fields=sorted(fields.keys()),
        schedule=type(change).__name__,
    )
    return investment


def _replace_open_schedule(db: Session, investment: Investment, change: DistributionChange) -> None:
    cashflows = db.execute(
        select(Cashflow).where(Cashflow.investment_id == investment.id).with_for_update()
    ).scalars().all()
    received = [cf for cf in cashflows if cf.status == CashflowStatus.RECEIVED]
    open_ids = [cf.id for cf in cashflows if cf.status != CashflowStatus.RECEIVED]

    db.execute(delete(CustomDistribution).where(CustomDistribution.investment_id == investment.id))
    if open_ids:
        db.execute(delete(Alert).where(Alert.cashflow_id.in_(open_ids)))
        db.execute(delete(CashTransaction).where(CashTransaction.cashflow_id.in_(open_ids)))
        db.execute(delete(Cashflow).where(Cashflow.id.in_(open_ids)))

    distributions = change.distributions if isinstance(change, Replaced) else None
    _install_schedule(db, investment, distributions, keep=received)


def delete_investment(db: Session, *, investment_id: uuid.UUID) -> None:
    """
    Delete an investment without rewriting realized cash history.

    Ledger entries of received cashflows survive, detached and annotated.
    Entries of open cashflows and the funding debit are removed, which returns
    the principal to the pool since balances are derived sums.
    """
    try:
        investment = db.execute(
            select(Investment).where(Investment.id == investment_id).with_for_update(of=Investment)
        ).scalar_one_or_none()
        if investment is None:
            raise NotFound("Investment not found")

        number = investment.investment_number
        snapshot = sa_model_to_dict(investment)
        cashflows = db.execute(
            select(Cashflow).where(Cashflow.investment_id == investment.id).with_for_update()
        ).scalars().all()
        received_ids = [cf.id for cf in cashflows if cf.status == CashflowStatus.RECEIVED]
        open_ids = [cf.id for cf in cashflows if cf.status != CashflowStatus.RECEIVED]
        note = f"Source investment #{number} ({investment.name}) deleted"

        detached = 0
        if received_ids:
            for tx in db.execute(
                select(CashTransaction).where(CashTransaction.cashflow_id.in_(received_ids)).with_for_update()
            ).scalars():
                detach_ledger_entry(tx, platform_id=investment.platform_id, note=note)
                detached += 1
        if open_ids:
            db.execute(delete(CashTransaction).where(CashTransaction.cashflow_id.in_(open_ids)))

        funding = _funding_entry(db, investment.id)
        if funding is not None:
            db.delete(funding)
        db.flush()

        # Anything else still pointing at the investment is history too.
        for tx in db.execute(
            select(CashTransaction).where(CashTransaction.investment_id == investment.id).with_for_update()
        ).scalars():
            detach_ledger_entry(tx, platform_id=investment.platform_id, note=note)
            detached += 1
        db.flush()

        db.execute(delete(Alert).where(Alert.investment_id == investment.id))
        db.execute(delete(CustomDistribution).where(CustomDistribution.investment_id == investment.id))
        db.execute(delete(Cashflow).where(Cashflow.investment_id == investment.id))
        db.delete(investment)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "investment.deleted",
        investment_id=str(investment_id),
        investment_number=number,
        cashflows_removed=len(received_ids) + len(open_ids),
        ledger_entries_detached=detached,
        investment=snapshot,
    )


def preview_cashflows(payload: CashflowPreviewRequest) -> list[GeneratedCashflow]:
    """Schedule an investment with these terms would get, without persisting anything."""
    if payload.distribution_frequency == DistributionFrequency.CUSTOM:
        raise ValidationError("Custom schedules are entered explicitly and cannot be previewed")
    if payload.end_date <= payload.start_date:
        return degenerate_schedule(
            end_date=payload.end_date,
            face_value=payload.face_value,
            total_expected_profit=payload.total_expected_profit,
        )
    return generate_cashflows(
        start_date=payload.start_date,
        end_date=payload.end_date,
        face_value=payload.face_value,
        total_expected_profit=payload.total_expected_profit,
        frequency=payload.distribution_frequency,
        structure=payload.profit_payment_structure,
    )

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker

# Make `backend/` importable regardless of pytest import mode.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.db.base import Base
from sukuk_tracker.core.db.session import get_db
from sukuk_tracker.main import create_app

# Ensure model modules are imported so Base.metadata is complete.
from sukuk_tracker.domain.portfolio.models import platforms as _platforms  # noqa: F401
from sukuk_tracker.domain.portfolio.models import investments as _investments  # noqa: F401
from sukuk_tracker.domain.portfolio.models import cashflows as _cashflows  # noqa: F401
from sukuk_tracker.domain.portfolio.models import custom_distributions as _custom_distributions  # noqa: F401
from sukuk_tracker.domain.portfolio.models import alerts as _alerts  # noqa: F401
from sukuk_tracker.domain.cash_management.models import cash as _cash  # noqa: F401

from sukuk_tracker.domain.cash_management.enums import CashTransactionType
from sukuk_tracker.domain.cash_management.models.cash import CashTransaction
from sukuk_tracker.domain.portfolio.enums import DistributionFrequency
from sukuk_tracker.domain.portfolio.models.platforms import Platform
from sukuk_tracker.domain.portfolio.schemas.investments import InvestmentCreate
from sukuk_tracker.domain.portfolio.services.investments import create_investment


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, class_=Session)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    settings.status_check_enabled = False
    app = create_app()

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


@pytest.fixture()
def platform(db_session: Session) -> Platform:
    p = Platform(name="Sukuk", type="sukuk")
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture()
def deposit(db_session: Session):
    def _deposit(platform_id, amount: str, on: date = date(2024, 1, 1)) -> CashTransaction:
        tx = CashTransaction(type=CashTransactionType.DEPOSIT, amount=Decimal(amount), date=on, platform_id=platform_id)
        db_session.add(tx)
        db_session.commit()
        return tx

    return _deposit


@pytest.fixture()
def make_investment(db_session: Session, platform: Platform):
    def _make(**overrides):
        data = {
            "platform_id": platform.id,
            "name": "Sukuk Al Ijara",
            "face_value": Decimal("10000"),
            "total_expected_profit": Decimal("1200"),
            "expected_irr": Decimal("12"),
            "start_date": date(2024, 1, 15),
            "end_date": date(2025, 1, 15),
            "distribution_frequency": DistributionFrequency.QUARTERLY,
        }
        data.update(overrides)
        return create_investment(db_session, payload=InvestmentCreate(**data))

    return _make

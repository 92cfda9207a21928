from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache
import importlib

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.db.base import Base


def _import_model_modules() -> None:
    module_names = [
        "sukuk_tracker.domain.portfolio.models.platforms",
        "sukuk_tracker.domain.portfolio.models.investments",
        "sukuk_tracker.domain.portfolio.models.cashflows",
        "sukuk_tracker.domain.portfolio.models.custom_distributions",
        "sukuk_tracker.domain.portfolio.models.alerts",
        "sukuk_tracker.domain.cash_management.models.cash",
    ]
    for module_name in module_names:
        importlib.import_module(module_name)


@lru_cache(maxsize=1)
def get_engine():
    # Lazy init: the app can import before the database is reachable.
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    _import_model_modules()
    Base.metadata.create_all(bind=engine)
    return engine


def get_session_local() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()

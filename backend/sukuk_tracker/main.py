from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sukuk_tracker.core.config import settings
from sukuk_tracker.core.db.session import get_session_local
from sukuk_tracker.core.logging import configure_logging, get_logger
from sukuk_tracker.core.middleware.context import get_request_id
from sukuk_tracker.core.middleware.request_id import RequestIdMiddleware
from sukuk_tracker.domain.cash_management.routes import router as cash_router
from sukuk_tracker.domain.portfolio.routes.alerts import router as alerts_router
from sukuk_tracker.domain.portfolio.routes.cashflows import router as cashflows_router
from sukuk_tracker.domain.portfolio.routes.forecast import router as forecast_router
from sukuk_tracker.domain.portfolio.routes.investments import router as investments_router
from sukuk_tracker.domain.portfolio.routes.platforms import router as platforms_router
from sukuk_tracker.domain.portfolio.services.status_sweeper import StatusSweeper
from sukuk_tracker.shared.exceptions import AppError, Conflict, InsufficientFunds, NotFound, ValidationError

logger = get_logger(__name__)

_STATUS_CODES: dict[type[AppError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    InsufficientFunds: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.status_check_enabled:
        sweeper = StatusSweeper(get_session_local(), interval_seconds=settings.status_check_interval_seconds)
        sweeper.start()
    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    body: dict = {"detail": str(exc), "request_id": get_request_id()}
    if isinstance(exc, InsufficientFunds):
        body["required"] = str(exc.required)
        body["available"] = str(exc.available)
    logger.info("request.rejected", path=request.url.path, error=type(exc).__name__, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Sukuk Portfolio Tracker - Backend", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(AppError, app_error_handler)

    @app.get("/health", tags=["admin"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for router in (
        platforms_router,
        investments_router,
        cashflows_router,
        alerts_router,
        forecast_router,
        cash_router,
    ):
        app.include_router(router, prefix="/api")

    return app


app = create_app()

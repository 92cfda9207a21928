from __future__ import annotations

from structlog import contextvars


def bind_request(*, request_id: str, method: str, path: str) -> None:
    contextvars.bind_contextvars(request_id=request_id, http_method=method, http_path=path)


def get_request_id() -> str | None:
    v = contextvars.get_contextvars().get("request_id")
    return str(v) if v is not None else None


def clear_request_context() -> None:
    contextvars.clear_contextvars()

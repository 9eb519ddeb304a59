"""
Request tracking for the API.

Every request gets an ``X-Request-ID`` (the caller's, if it sent one), a
``request_completed`` structured log line with its duration, and the
request context (id, client ip, endpoint, admin id) bound to
``LogContext`` so repository and store logs carry it too.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.api.middleware import get_client_ip
from src.exceptions import HubError
from src.logging_config import LogContext, get_logger

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

logger = get_logger(__name__)

# Query parameters never written to logs verbatim.
SENSITIVE_PARAMS = {"token", "password", "access_token", "authorization"}


def generate_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> str | None:
    return _request_id_ctx.get()


def redact_query(query: str) -> str:
    parts = []
    for part in query.split("&"):
        key = part.split("=", 1)[0]
        parts.append(f"{key}=***" if key.lower() in SENSITIVE_PARAMS else part)
    return "&".join(parts)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Request id propagation, timing and one structured log line per request.

    List endpoints set ``request.state.result_count`` and admin routes set
    ``request.state.admin_id``; both are copied into the log line.
    Server-sent event streams are logged when the response starts, not when
    the stream ends.
    """

    def __init__(self, app: ASGIApp, *, slow_request_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or generate_request_id()
        _request_id_ctx.set(request_id)
        LogContext.clear()
        LogContext.set_request_id(request_id)
        LogContext.set_client_ip(get_client_ip(request))
        LogContext.set_endpoint(f"{request.method} {request.url.path}")

        meta: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.url.query:
            meta["query"] = redact_query(request.url.query)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            meta["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
            if isinstance(exc, HubError):
                exc.request_id = request_id
                exc.log()
            else:
                logger.error("request_failed", extra={**meta, "error_type": type(exc).__name__}, exc_info=True)
            raise

        response.headers["X-Request-ID"] = request_id
        meta["status_code"] = response.status_code
        meta["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
        for attr in ("result_count", "admin_id"):
            if hasattr(request.state, attr):
                meta[attr] = getattr(request.state, attr)
        if response.headers.get("content-type", "").startswith("text/event-stream"):
            meta["stream"] = True

        if meta["duration_ms"] >= self.slow_request_threshold_ms:
            logger.warning("request_completed_slow", extra=meta)
        else:
            logger.info("request_completed", extra=meta)
        return response


__all__ = [
    "ObservabilityMiddleware",
    "generate_request_id",
    "get_request_id",
    "redact_query",
]

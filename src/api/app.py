"""
FastAPI application factory.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.middleware import setup_compression, setup_cors, setup_request_size_limit, setup_security_headers
from src.api.observability import ObservabilityMiddleware, generate_request_id, get_request_id
from src.api.routes import admin_analytics, admin_auth, admin_content, admin_messages, admin_notifications
from src.api.routes import admin_settings, admin_tools, admin_users, files, public
from src.api.state import AppState
from src.config import settings
from src.exceptions import HubError, exception_to_http_status
from src.logging_config import get_logger
from src.store import DocumentStore, ObjectStorage

logger = get_logger(__name__)


def create_app(
    *,
    db_path: Path | None = None,
    storage_path: Path | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = DocumentStore(db_path or settings.db_path)
        storage = ObjectStorage(storage_path or settings.storage_path, settings.storage_base_url)
        state = AppState.build(store, storage)
        state.site_settings.ensure_defaults()
        state.tools.seed_defaults()
        app.state.state = state
        logger.info("AI Tools Hub API started", extra={"db_path": str(store.db_path)})
        yield
        state.hub.close_all()

    app = FastAPI(
        title="AI Tools Hub API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    setup_compression(app)
    setup_cors(app)
    setup_security_headers(app)
    setup_request_size_limit(app)

    # Observability middleware (must be added last to wrap all others)
    app.add_middleware(ObservabilityMiddleware)

    @app.get("/v1/health")
    def health(response: Response) -> dict:
        response.headers["Cache-Control"] = "no-store"
        return {"ok": True}

    app.include_router(public.router)
    app.include_router(files.router)
    app.include_router(admin_auth.router)
    app.include_router(admin_users.router)
    app.include_router(admin_content.router)
    app.include_router(admin_tools.router)
    app.include_router(admin_messages.router)
    app.include_router(admin_notifications.router)
    app.include_router(admin_settings.router)
    app.include_router(admin_analytics.router)

    def _error_headers(request: Request) -> dict[str, str]:
        # Ensure clients always get a request id for correlation, even on errors.
        rid = request.headers.get("x-request-id") or get_request_id() or generate_request_id()
        return {"X-Request-ID": rid, "Cache-Control": "no-store"}

    @app.exception_handler(HubError)
    def _hub_error(request: Request, exc: HubError) -> JSONResponse:
        headers = _error_headers(request)
        exc.request_id = headers["X-Request-ID"]
        status = exception_to_http_status(exc)
        if status >= 500:
            exc.log()
        if status == 401:
            headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        headers = _error_headers(request)
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": f"{field}: {first.get('msg', 'Invalid request')}" if field else "Invalid request",
                "request_id": headers["X-Request-ID"],
            },
            headers=headers,
        )

    @app.exception_handler(Exception)
    def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        # Logged by ObservabilityMiddleware.
        _ = exc
        return JSONResponse(status_code=500, content={"error": "internal_error"}, headers=_error_headers(request))

    return app


app = create_app()

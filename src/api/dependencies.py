"""
Dependency helpers for API routes.

These are kept as simple functions (not FastAPI Depends) because the app
already uses request.app.state for most stateful components.
"""

from __future__ import annotations

from fastapi import Request

from src.api.middleware import get_client_ip
from src.api.state import AppState
from src.auth import AdminSession, parse_bearer_token
from src.config import settings
from src.exceptions import AuthenticationError, ConfirmationRequiredError
from src.logging_config import LogContext
from src.store import DocumentStore, ObjectStorage


def get_state(request: Request) -> AppState:
    state = getattr(request.app.state, "state", None)
    if state is None:
        state = AppState.build(
            DocumentStore(settings.db_path),
            ObjectStorage(settings.storage_path, settings.storage_base_url),
        )
        request.app.state.state = state
    return state


def require_admin(request: Request) -> AdminSession:
    """Resolve the admin session from ``Authorization: Bearer <token>``."""
    token = parse_bearer_token(request.headers.get("authorization"))
    if not token:
        raise AuthenticationError("Missing bearer token")
    session = get_state(request).auth.authenticate(token)
    request.state.admin_id = session.admin_id
    LogContext.set_admin_id(session.admin_id)
    return session


def require_permission(request: Request, permission: str) -> AdminSession:
    session = require_admin(request)
    session.require(permission)
    return session


def require_confirmation(confirm: bool, action: str) -> None:
    if not confirm:
        raise ConfirmationRequiredError(action)


def client_ip(request: Request) -> str:
    return get_client_ip(request)


def page_params(limit: int | None, offset: int) -> tuple[int, int]:
    """Clamp pagination query params to the configured bounds."""
    size = settings.default_page_size if limit is None else limit
    return max(1, min(int(size), settings.max_page_size)), max(0, int(offset))

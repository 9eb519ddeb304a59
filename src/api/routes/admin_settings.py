"""
Site settings, security policies and the security event log.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request, Response

from src.api.dependencies import client_ip, get_state, page_params, require_confirmation, require_permission
from src.api.models import PageResponse, PolicyToggleRequest, SettingsSectionRequest, StatusPatchRequest
from src.exports import security_events_to_csv
from src.filtering import paginate
from src.security.validators import validate_document_id

router = APIRouter(prefix="/v1/admin", tags=["admin-settings"])


@router.get("/settings")
def get_settings(request: Request, response: Response) -> dict:
    require_permission(request, "settings.view")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).site_settings.get_settings()


@router.put("/settings")
def replace_settings(request: Request, response: Response, payload: dict[str, Any] = Body(...)) -> dict:
    require_permission(request, "settings.manage")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).site_settings.replace(payload)


@router.patch("/settings/{section}")
def update_settings_section(section: str, payload: SettingsSectionRequest, request: Request, response: Response) -> dict:
    require_permission(request, "settings.manage")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).site_settings.update_section(section, payload.values)


@router.post("/settings/reset")
def reset_settings(request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "settings.manage")
    require_confirmation(confirm, "reset all settings")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).site_settings.reset()


# -----------------------------------------------------------------------------
# Security
# -----------------------------------------------------------------------------


@router.get("/security/policies")
def list_policies(request: Request, response: Response) -> dict:
    require_permission(request, "settings.view")
    items = get_state(request).security.list_policies()
    response.headers["Cache-Control"] = "no-store"
    return {"total": len(items), "items": items}


@router.post("/security/policies/{policy_id}/toggle")
def toggle_policy(
    policy_id: str,
    request: Request,
    response: Response,
    payload: PolicyToggleRequest | None = None,
) -> dict:
    require_permission(request, "security.manage")
    policy = get_state(request).security.toggle_policy(
        validate_document_id(policy_id),
        payload.enabled if payload else None,
    )
    response.headers["Cache-Control"] = "no-store"
    return policy


@router.get("/security/events", response_model=PageResponse)
def list_security_events(
    request: Request,
    response: Response,
    q: str | None = None,
    severity: str | None = None,
    status: str | None = None,
    type: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    require_permission(request, "security.manage")
    limit, offset = page_params(limit, offset)
    events = get_state(request).security.list_events(q, severity=severity, status=status, type=type)
    total, page = paginate(events, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "no-store"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.patch("/security/events/{event_id}")
def set_security_event_status(event_id: str, payload: StatusPatchRequest, request: Request, response: Response) -> dict:
    require_permission(request, "security.manage")
    event = get_state(request).security.set_event_status(validate_document_id(event_id), payload.status)
    response.headers["Cache-Control"] = "no-store"
    return event


@router.get("/security/events/export.csv")
def export_security_events(request: Request) -> Response:
    session = require_permission(request, "security.manage")
    security = get_state(request).security
    events = security.list_events()
    security.record_event(
        "data_export",
        f"Security log exported by {session.email}",
        severity="low",
        ip=client_ip(request),
        status="approved",
    )
    return Response(
        content=security_events_to_csv(events),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="security-log.csv"', "Cache-Control": "no-store"},
    )

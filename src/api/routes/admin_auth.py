"""
Admin sign-in, sign-out, current session and admin account management.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.api.dependencies import client_ip, get_state, require_admin, require_permission
from src.api.models import AdminCreateRequest, AdminPatchRequest, LoginRequest, LoginResponse
from src.auth import parse_bearer_token
from src.repository.admins import public_admin
from src.security.validators import validate_document_id

router = APIRouter(prefix="/v1/admin", tags=["admin-auth"])


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request, response: Response) -> dict:
    state = get_state(request)
    session = state.auth.login(str(payload.email), payload.password, client_ip=client_ip(request))
    admin = state.admins.require(session.admin_id)
    response.headers["Cache-Control"] = "no-store"
    return {
        "token": session.token,
        "token_type": "bearer",
        "expires_at": session.expires_at,
        "admin": public_admin(admin),
    }


@router.post("/auth/logout")
def logout(request: Request, response: Response) -> dict:
    require_admin(request)
    token = parse_bearer_token(request.headers.get("authorization"))
    revoked = get_state(request).auth.logout(token)
    response.headers["Cache-Control"] = "no-store"
    return {"ok": revoked}


@router.get("/auth/me")
def me(request: Request, response: Response) -> dict:
    session = require_admin(request)
    response.headers["Cache-Control"] = "no-store"
    return session.to_dict()


# -----------------------------------------------------------------------------
# Admin accounts
# -----------------------------------------------------------------------------


@router.get("/admins")
def list_admins(request: Request, response: Response) -> dict:
    require_permission(request, "admins.manage")
    items = [public_admin(a) for a in get_state(request).admins.list()]
    response.headers["Cache-Control"] = "no-store"
    return {"total": len(items), "items": items}


@router.post("/admins", status_code=201)
def create_admin(payload: AdminCreateRequest, request: Request, response: Response) -> dict:
    require_permission(request, "admins.manage")
    admin = get_state(request).admins.create_admin(
        str(payload.email),
        payload.password,
        role=payload.role,
        display_name=payload.displayName,
        permissions=payload.permissions,
    )
    response.headers["Cache-Control"] = "no-store"
    return public_admin(admin)


@router.patch("/admins/{admin_id}")
def patch_admin(admin_id: str, payload: AdminPatchRequest, request: Request, response: Response) -> dict:
    require_permission(request, "admins.manage")
    state = get_state(request)
    admin = state.admins.require(validate_document_id(admin_id))
    if payload.role is not None:
        admin = state.admins.set_role(admin_id, payload.role, payload.permissions)
    elif payload.permissions is not None:
        admin = state.admins.set_permissions(admin_id, payload.permissions)
    if payload.isActive is not None:
        admin = state.admins.set_status(admin_id, payload.isActive)
        if not payload.isActive:
            state.sessions.revoke_admin(admin_id)
    response.headers["Cache-Control"] = "no-store"
    return public_admin(admin)

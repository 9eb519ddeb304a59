"""
Admin user management.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.api.dependencies import get_state, page_params, require_confirmation, require_permission
from src.api.models import BulkIdsRequest, PageResponse, UserPatchRequest
from src.exports import users_to_csv
from src.filtering import paginate
from src.security.validators import validate_document_id

router = APIRouter(prefix="/v1/admin/users", tags=["admin-users"])


@router.get("", response_model=PageResponse)
def list_users(
    request: Request,
    response: Response,
    q: str | None = None,
    status: str | None = None,
    role: str | None = None,
    premium: bool | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    require_permission(request, "users.view")
    limit, offset = page_params(limit, offset)
    users = get_state(request).users.search(q, status=status, role=role, premium=premium)
    total, page = paginate(users, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "no-store"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.get("/export.csv")
def export_users_csv(
    request: Request,
    q: str | None = None,
    status: str | None = None,
    role: str | None = None,
    premium: bool | None = None,
) -> Response:
    require_permission(request, "users.view")
    users = get_state(request).users.search(q, status=status, role=role, premium=premium)
    return Response(
        content=users_to_csv(users),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="users.csv"', "Cache-Control": "no-store"},
    )


@router.get("/popular-tools")
def popular_tools(request: Request, response: Response, limit: int = 10) -> dict:
    require_permission(request, "users.view")
    items = get_state(request).users.popular_tools(max(1, min(int(limit), 100)))
    response.headers["Cache-Control"] = "no-store"
    return {"items": items}


@router.post("/bulk-delete")
def bulk_delete_users(payload: BulkIdsRequest, request: Request, response: Response) -> dict:
    require_permission(request, "users.manage")
    require_confirmation(payload.confirm, "delete these users")
    ids = [validate_document_id(i) for i in payload.ids]
    deleted = get_state(request).users.bulk_delete(ids)
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": deleted}


@router.get("/{user_id}")
def get_user(user_id: str, request: Request, response: Response) -> dict:
    require_permission(request, "users.view")
    state = get_state(request)
    user = state.users.require(validate_document_id(user_id))
    user["toolUsage"] = state.users.get_tool_usage(user_id)
    response.headers["Cache-Control"] = "no-store"
    return user


@router.patch("/{user_id}")
def patch_user(user_id: str, payload: UserPatchRequest, request: Request, response: Response) -> dict:
    require_permission(request, "users.manage")
    users = get_state(request).users
    user = users.require(validate_document_id(user_id))
    if payload.isActive is not None:
        user = users.set_status(user_id, payload.isActive)
    if payload.isPremium is not None:
        user = users.set_premium(user_id, payload.isPremium)
    if payload.role is not None:
        user = users.set_role(user_id, payload.role)
    response.headers["Cache-Control"] = "no-store"
    return user


@router.delete("/{user_id}")
def delete_user(user_id: str, request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "users.manage")
    require_confirmation(confirm, "delete this user")
    removed_usage = get_state(request).users.delete_user(validate_document_id(user_id))
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": True, "id": user_id, "tool_usage_deleted": removed_usage}

"""
Admin tool catalog management.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.api.dependencies import get_state, page_params, require_confirmation, require_permission
from src.api.models import BulkToolStatusRequest, PageResponse, ToolCreateRequest, ToolToggleRequest, ToolUpdateRequest
from src.exceptions import DocumentNotFoundError
from src.filtering import paginate
from src.security.validators import validate_document_id
from src.store import collections as col

router = APIRouter(prefix="/v1/admin/tools", tags=["admin-tools"])


@router.get("", response_model=PageResponse)
def list_tools(
    request: Request,
    response: Response,
    q: str | None = None,
    category: str | None = None,
    status: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    require_permission(request, "tools.view")
    limit, offset = page_params(limit, offset)
    tools = get_state(request).tools.search(q, category=category, status=status)
    total, page = paginate(tools, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "no-store"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.post("", status_code=201)
def create_tool(payload: ToolCreateRequest, request: Request, response: Response) -> dict:
    require_permission(request, "tools.manage")
    tool = get_state(request).tools.create_tool(payload.model_dump())
    response.headers["Cache-Control"] = "no-store"
    return tool


@router.post("/bulk-status")
def bulk_tool_status(payload: BulkToolStatusRequest, request: Request, response: Response) -> dict:
    require_permission(request, "tools.manage")
    ids = [validate_document_id(i) for i in payload.ids]
    updated = get_state(request).tools.bulk_set_status(ids, payload.isActive)
    response.headers["Cache-Control"] = "no-store"
    return {"updated": updated, "isActive": payload.isActive}


@router.put("/{tool_id}")
def update_tool(tool_id: str, payload: ToolUpdateRequest, request: Request, response: Response) -> dict:
    require_permission(request, "tools.manage")
    tool = get_state(request).tools.update_tool(validate_document_id(tool_id), payload.model_dump(exclude_unset=True))
    response.headers["Cache-Control"] = "no-store"
    return tool


@router.post("/{tool_id}/toggle")
def toggle_tool(tool_id: str, request: Request, response: Response, payload: ToolToggleRequest | None = None) -> dict:
    require_permission(request, "tools.manage")
    tools = get_state(request).tools
    field = payload.field if payload else "isActive"
    validate_document_id(tool_id)
    tool = tools.toggle_premium(tool_id) if field == "isPremium" else tools.toggle_active(tool_id)
    response.headers["Cache-Control"] = "no-store"
    return tool


@router.delete("/{tool_id}")
def delete_tool(tool_id: str, request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "tools.manage")
    require_confirmation(confirm, "delete this tool")
    if not get_state(request).tools.delete(validate_document_id(tool_id)):
        raise DocumentNotFoundError(col.AI_TOOLS, tool_id)
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": True, "id": tool_id}

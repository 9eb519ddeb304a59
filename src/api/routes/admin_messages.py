"""
Admin contact message inbox.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.api.dependencies import get_state, page_params, require_confirmation, require_permission
from src.api.models import MessagePatchRequest, PageResponse, ReplyRequest
from src.exceptions import DocumentNotFoundError
from src.filtering import paginate
from src.security.validators import validate_document_id
from src.store import collections as col

router = APIRouter(prefix="/v1/admin/messages", tags=["admin-messages"])


@router.get("", response_model=PageResponse)
def list_messages(
    request: Request,
    response: Response,
    q: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    require_permission(request, "messages.view")
    limit, offset = page_params(limit, offset)
    messages = get_state(request).messages.search(q, status=status, priority=priority)
    total, page = paginate(messages, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "no-store"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.get("/{message_id}")
def get_message(message_id: str, request: Request, response: Response) -> dict:
    require_permission(request, "messages.view")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).messages.require(validate_document_id(message_id))


@router.post("/{message_id}/read")
def mark_message_read(message_id: str, request: Request, response: Response) -> dict:
    require_permission(request, "messages.manage")
    message = get_state(request).messages.mark_read(validate_document_id(message_id))
    response.headers["Cache-Control"] = "no-store"
    return message


@router.post("/{message_id}/reply")
def reply_to_message(message_id: str, payload: ReplyRequest, request: Request, response: Response) -> dict:
    session = require_permission(request, "messages.manage")
    message = get_state(request).messages.reply(
        validate_document_id(message_id),
        payload.reply,
        replied_by=session.email,
    )
    response.headers["Cache-Control"] = "no-store"
    return message


@router.patch("/{message_id}")
def patch_message(message_id: str, payload: MessagePatchRequest, request: Request, response: Response) -> dict:
    require_permission(request, "messages.manage")
    messages = get_state(request).messages
    message = messages.require(validate_document_id(message_id))
    if payload.status is not None:
        message = messages.set_status(message_id, payload.status)
    if payload.priority is not None:
        message = messages.set_priority(message_id, payload.priority)
    response.headers["Cache-Control"] = "no-store"
    return message


@router.delete("/{message_id}")
def delete_message(message_id: str, request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "messages.manage")
    require_confirmation(confirm, "delete this message")
    if not get_state(request).messages.delete(validate_document_id(message_id)):
        raise DocumentNotFoundError(col.CONTACT_MESSAGES, message_id)
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": True, "id": message_id}

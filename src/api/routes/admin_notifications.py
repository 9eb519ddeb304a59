"""
Admin notification bell: unread list, click handling and a live SSE stream.
"""

from __future__ import annotations

import json
import queue
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import StreamingResponse

from src.api.dependencies import get_state, require_admin
from src.api.models import ClickResponse, NotificationsResponse
from src.notifications import badge_label, dropdown_view
from src.security.validators import validate_document_id

router = APIRouter(prefix="/v1/admin/notifications", tags=["admin-notifications"])

HEARTBEAT_SECONDS = 15.0


def _bell_payload(notifications: list[dict[str, Any]]) -> dict[str, Any]:
    view = dropdown_view(notifications)
    return {
        "count": len(notifications),
        "badge": badge_label(len(notifications)),
        "items": view.items,
        "more_count": view.more_count,
        "more_label": view.more_label,
    }


@router.get("", response_model=NotificationsResponse)
def list_notifications(request: Request, response: Response) -> dict:
    session = require_admin(request)
    center = get_state(request).hub.open(session)
    response.headers["Cache-Control"] = "no-store"
    return _bell_payload(center.notifications)


@router.post("/{notification_id}/click", response_model=ClickResponse)
def click_notification(notification_id: str, request: Request, response: Response) -> dict:
    session = require_admin(request)
    center = get_state(request).hub.open(session)
    result = center.click(validate_document_id(notification_id))
    response.headers["Cache-Control"] = "no-store"
    return result.to_dict()


@router.post("/read-all")
def mark_all_read(request: Request, response: Response) -> dict:
    require_admin(request)
    updated = get_state(request).notifications.mark_all_read()
    response.headers["Cache-Control"] = "no-store"
    return {"updated": updated}


@router.get("/stream")
def stream_notifications(request: Request, max_events: int = 0) -> StreamingResponse:
    """
    Server-Sent Events: one ``notifications`` event with the full bell
    payload now and after every change. ``max_events`` > 0 ends the stream
    after that many events. The stream ends with a ``closed`` event when
    the admin session is revoked or expires.
    """
    session = require_admin(request)
    state = get_state(request)
    center = state.hub.open(session)
    watcher = center.watch()

    def _sse(data: Any, *, event: str = "message") -> bytes:
        line = json.dumps(data, ensure_ascii=False)
        return f"event: {event}\ndata: {line}\n\n".encode()

    def generator():
        sent = 0
        try:
            while True:
                try:
                    snapshot = watcher.get(timeout=HEARTBEAT_SECONDS)
                except queue.Empty:
                    # Expiry of this session closes the center and ends the stream.
                    state.sessions.prune_expired()
                    yield b": keep-alive\n\n"
                    continue
                if snapshot is None:
                    yield _sse({"closed": True}, event="closed")
                    return
                yield _sse(_bell_payload(snapshot), event="notifications")
                sent += 1
                if max_events > 0 and sent >= max_events:
                    return
        finally:
            center.unwatch(watcher)

    return StreamingResponse(
        generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-store", "X-Accel-Buffering": "no"},
    )

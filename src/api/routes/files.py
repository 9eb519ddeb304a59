"""
Serves objects from the local object storage (uploaded blog images).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from src.api.dependencies import get_state
from src.exceptions import NotFoundError

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{path:path}")
def get_file(path: str, request: Request) -> Response:
    storage = get_state(request).storage
    try:
        data = storage.read(path)
    except FileNotFoundError as exc:
        raise NotFoundError("File not found", detail=path) from exc
    return Response(
        content=data,
        media_type=storage.guess_content_type(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )

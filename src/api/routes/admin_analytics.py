"""
Dashboard statistics and analytics export.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.analytics import overview
from src.api.dependencies import get_state, require_permission
from src.exports import analytics_to_json

router = APIRouter(prefix="/v1/admin/analytics", tags=["admin-analytics"])


@router.get("/overview")
def analytics_overview(request: Request, response: Response, range: str = "7d") -> dict:
    require_permission(request, "analytics.view")
    response.headers["Cache-Control"] = "no-store"
    return overview(get_state(request).store, time_range=range)


@router.get("/export.json")
def export_analytics(request: Request, range: str = "7d") -> Response:
    require_permission(request, "analytics.view")
    payload = overview(get_state(request).store, time_range=range)
    return Response(
        content=analytics_to_json(payload),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="analytics.json"', "Cache-Control": "no-store"},
    )

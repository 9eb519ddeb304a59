"""
Public site routes: tool catalog, blog, contact form, site info and user profile sync.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from src.api.dependencies import get_state, page_params
from src.api.models import ContactRequest, PageResponse, UserProfilePatchRequest, UserProfileRequest
from src.exceptions import DocumentNotFoundError, NotFoundError, ValidationError
from src.filtering import paginate
from src.security.validators import validate_document_id
from src.store import collections as col

router = APIRouter(prefix="/v1", tags=["public"])


def _extract_user_id(request: Request) -> str:
    user_id = (request.headers.get("x-user-id") or "").strip()[:128]
    if not user_id:
        raise ValidationError("X-User-ID header required", field="X-User-ID")
    return validate_document_id(user_id, field="X-User-ID")


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------


@router.get("/tools")
def list_tools(request: Request, response: Response, category: str | None = None) -> dict:
    items = get_state(request).tools.list_active(category)
    response.headers["Cache-Control"] = "public, max-age=60"
    return {"total": len(items), "items": items}


@router.get("/tools/{tool_id}")
def get_tool(tool_id: str, request: Request, response: Response) -> dict:
    tool = get_state(request).tools.get(validate_document_id(tool_id))
    if tool is None or not tool.get("isActive", True):
        raise DocumentNotFoundError(col.AI_TOOLS, tool_id)
    response.headers["Cache-Control"] = "public, max-age=60"
    return tool


@router.post("/tools/{tool_id}/usage")
def record_tool_usage(tool_id: str, request: Request, response: Response) -> dict:
    """Count one use of a tool by the signed-in user (``X-User-ID``)."""
    user_id = _extract_user_id(request)
    state = get_state(request)
    tool = state.tools.require(validate_document_id(tool_id))
    state.tools.increment_usage(tool["id"])
    record = state.users.track_tool_usage(user_id, tool.get("name") or tool["id"])
    response.headers["Cache-Control"] = "no-store"
    return {"user_id": user_id, "tool_id": tool["id"], "usageCount": record.get("usageCount", 0)}


# -----------------------------------------------------------------------------
# Blog
# -----------------------------------------------------------------------------


@router.get("/blog", response_model=PageResponse)
def list_blog_posts(
    request: Request,
    response: Response,
    q: str | None = None,
    tag: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    limit, offset = page_params(limit, offset)
    posts = get_state(request).posts.list_published(q, tag=tag)
    total, page = paginate(posts, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "public, max-age=60"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.get("/blog/{post_id}")
def get_blog_post(post_id: str, request: Request, response: Response) -> dict:
    posts = get_state(request).posts
    post = posts.get_published(validate_document_id(post_id))
    if post is None:
        raise NotFoundError("Post not found", detail=post_id)
    posts.increment_views(post_id)
    post["views"] = int(post.get("views") or 0) + 1
    response.headers["Cache-Control"] = "no-store"
    return post


@router.post("/blog/{post_id}/like")
def like_blog_post(post_id: str, request: Request, response: Response) -> dict:
    posts = get_state(request).posts
    if posts.get_published(validate_document_id(post_id)) is None:
        raise NotFoundError("Post not found", detail=post_id)
    post = posts.like(post_id)
    response.headers["Cache-Control"] = "no-store"
    return {"id": post_id, "likes": post.get("likes", 0)}


# -----------------------------------------------------------------------------
# Contact + site info
# -----------------------------------------------------------------------------


@router.post("/contact", status_code=201)
def submit_contact(payload: ContactRequest, request: Request, response: Response) -> dict:
    message = get_state(request).messages.submit(payload.model_dump())
    response.headers["Cache-Control"] = "no-store"
    return {
        "id": message["id"],
        "status": message["status"],
        "message": "Thank you for your message! We'll get back to you soon.",
    }


@router.get("/site")
def site_info(request: Request, response: Response) -> dict:
    response.headers["Cache-Control"] = "public, max-age=60"
    return get_state(request).site_settings.public_settings()


@router.get("/content")
def website_content(request: Request, response: Response, type: str | None = None) -> dict:
    items = get_state(request).content.list_sections(type, active_only=True)
    response.headers["Cache-Control"] = "public, max-age=60"
    return {"total": len(items), "items": items}


# -----------------------------------------------------------------------------
# Signed-in users
# -----------------------------------------------------------------------------


@router.put("/users/me")
def sync_profile(payload: UserProfileRequest, request: Request, response: Response) -> dict:
    """Create or refresh the caller's profile after sign-in."""
    user_id = _extract_user_id(request)
    profile = get_state(request).users.upsert_profile(
        user_id,
        email=str(payload.email),
        display_name=payload.displayName,
        provider=payload.provider,
        photo_url=payload.photoURL,
    )
    response.headers["Cache-Control"] = "no-store"
    return profile


@router.get("/users/me")
def get_profile(request: Request, response: Response) -> dict:
    profile = get_state(request).users.require(_extract_user_id(request))
    response.headers["Cache-Control"] = "no-store"
    return profile


@router.patch("/users/me")
def update_profile(payload: UserProfilePatchRequest, request: Request, response: Response) -> dict:
    user_id = _extract_user_id(request)
    users = get_state(request).users
    users.require(user_id)
    profile = users.update_profile(user_id, payload.model_dump(exclude_none=True))
    response.headers["Cache-Control"] = "no-store"
    return profile


@router.get("/users/me/usage")
def my_tool_usage(request: Request, response: Response) -> dict:
    user_id = _extract_user_id(request)
    items = get_state(request).users.get_tool_usage(user_id)
    response.headers["Cache-Control"] = "no-store"
    return {"user_id": user_id, "total": len(items), "items": items}

"""
Admin blog posts, image uploads and website content sections.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from src.api.dependencies import get_state, page_params, require_confirmation, require_permission
from src.api.models import (
    ImageUploadRequest,
    PageResponse,
    PostCreateRequest,
    PostUpdateRequest,
    StatusPatchRequest,
    WebsiteContentRequest,
    WebsiteContentUpdateRequest,
)
from src.exceptions import DocumentNotFoundError
from src.filtering import paginate
from src.security.validators import decode_image_upload, validate_document_id
from src.store import blog_image_path
from src.store import collections as col

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin-content"])


# -----------------------------------------------------------------------------
# Blog posts
# -----------------------------------------------------------------------------


@router.get("/posts", response_model=PageResponse)
def list_posts(
    request: Request,
    response: Response,
    q: str | None = None,
    status: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    require_permission(request, "content.view")
    limit, offset = page_params(limit, offset)
    posts = get_state(request).posts.search(q, status=status)
    total, page = paginate(posts, limit=limit, offset=offset)
    request.state.result_count = len(page)
    response.headers["Cache-Control"] = "no-store"
    return {"total": total, "limit": limit, "offset": offset, "items": page}


@router.get("/posts/{post_id}")
def get_post(post_id: str, request: Request, response: Response) -> dict:
    require_permission(request, "content.view")
    response.headers["Cache-Control"] = "no-store"
    return get_state(request).posts.require(validate_document_id(post_id))


@router.post("/posts", status_code=201)
def create_post(payload: PostCreateRequest, request: Request, response: Response) -> dict:
    session = require_permission(request, "content.manage")
    post = get_state(request).posts.create_post(
        payload.model_dump(),
        author=session.display_name or session.email,
        author_id=session.admin_id,
    )
    response.headers["Cache-Control"] = "no-store"
    return post


@router.put("/posts/{post_id}")
def update_post(post_id: str, payload: PostUpdateRequest, request: Request, response: Response) -> dict:
    require_permission(request, "content.manage")
    post = get_state(request).posts.update_post(validate_document_id(post_id), payload.model_dump(exclude_unset=True))
    response.headers["Cache-Control"] = "no-store"
    return post


@router.patch("/posts/{post_id}/status")
def set_post_status(post_id: str, payload: StatusPatchRequest, request: Request, response: Response) -> dict:
    require_permission(request, "content.manage")
    post = get_state(request).posts.set_status(validate_document_id(post_id), payload.status)
    response.headers["Cache-Control"] = "no-store"
    return post


@router.delete("/posts/{post_id}")
def delete_post(post_id: str, request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "content.manage")
    require_confirmation(confirm, "delete this post")
    if not get_state(request).posts.delete(validate_document_id(post_id)):
        raise DocumentNotFoundError(col.BLOG_POSTS, post_id)
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": True, "id": post_id}


@router.post("/uploads/blog-image", status_code=201)
def upload_blog_image(payload: ImageUploadRequest, request: Request, response: Response) -> dict:
    """Store an editor image under ``blog-images/{timestamp}-{filename}`` and return its URL."""
    require_permission(request, "content.manage")
    data = decode_image_upload(payload.data_base64, payload.content_type)
    path = blog_image_path(payload.filename)
    url = get_state(request).storage.upload(path, data, payload.content_type)
    logger.info("Uploaded blog image %s (%d bytes)", path, len(data))
    response.headers["Cache-Control"] = "no-store"
    return {"path": path, "url": url, "size": len(data)}


# -----------------------------------------------------------------------------
# Website content sections
# -----------------------------------------------------------------------------


@router.get("/website-content")
def list_website_content(request: Request, response: Response, type: str | None = None) -> dict:
    require_permission(request, "content.view")
    items = get_state(request).content.list_sections(type)
    response.headers["Cache-Control"] = "no-store"
    return {"total": len(items), "items": items}


@router.post("/website-content", status_code=201)
def create_website_content(payload: WebsiteContentRequest, request: Request, response: Response) -> dict:
    require_permission(request, "content.manage")
    section = get_state(request).content.create_section(payload.model_dump())
    response.headers["Cache-Control"] = "no-store"
    return section


@router.put("/website-content/{section_id}")
def update_website_content(
    section_id: str, payload: WebsiteContentUpdateRequest, request: Request, response: Response
) -> dict:
    require_permission(request, "content.manage")
    section = get_state(request).content.update_section(
        validate_document_id(section_id), payload.model_dump(exclude_unset=True)
    )
    response.headers["Cache-Control"] = "no-store"
    return section


@router.delete("/website-content/{section_id}")
def delete_website_content(section_id: str, request: Request, response: Response, confirm: bool = False) -> dict:
    require_permission(request, "content.manage")
    require_confirmation(confirm, "delete this section")
    if not get_state(request).content.delete(validate_document_id(section_id)):
        raise DocumentNotFoundError(col.WEBSITE_CONTENT, section_id)
    response.headers["Cache-Control"] = "no-store"
    return {"deleted": True, "id": section_id}

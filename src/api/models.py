"""
Pydantic models for API requests and responses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, EmailStr, Field
from pydantic.config import ConfigDict


# =============================================================================
# Public Request Models
# =============================================================================


class ContactRequest(BaseModel):
    """Contact form submission."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Jo",
                    "email": "jo@x.com",
                    "company": "",
                    "inquiryType": "general",
                    "subject": "Hi",
                    "message": "Hello",
                }
            ]
        }
    )

    name: str = Field(default="", max_length=200)
    email: EmailStr
    company: str = Field(default="", max_length=200)
    inquiryType: str = Field(default="general", max_length=50)
    subject: str = Field(default="", max_length=300)
    message: str = Field(default="", max_length=10_000)


class UserProfileRequest(BaseModel):
    """Profile sync after the identity provider signs a user in."""

    email: EmailStr
    displayName: str = Field(default="", max_length=200)
    photoURL: str = Field(default="", max_length=2000)
    provider: str = Field(default="email", max_length=40)


class UserProfilePatchRequest(BaseModel):
    displayName: str | None = Field(default=None, max_length=200)
    photoURL: str | None = Field(default=None, max_length=2000)
    preferences: dict[str, Any] | None = None


# =============================================================================
# Admin Request Models
# =============================================================================


class LoginRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"email": "admin@aitoolshub.com", "password": "admin123"}]}
    )

    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class UserPatchRequest(BaseModel):
    """Single-field overwrites on a user; unset fields are left alone."""

    isActive: bool | None = None
    isPremium: bool | None = None
    role: str | None = Field(default=None, max_length=40)


class BulkIdsRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=500)
    confirm: bool = False


class AdminCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=200)
    role: str = Field(default="admin", max_length=40)
    displayName: str = Field(default="", max_length=200)
    permissions: list[str] | None = None


class AdminPatchRequest(BaseModel):
    role: str | None = Field(default=None, max_length=40)
    permissions: list[str] | None = None
    isActive: bool | None = None


class PostCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "title": "10 ways to use AI for PDFs",
                    "content": "<p>...</p>",
                    "excerpt": "",
                    "tags": "ai, pdf",
                    "status": "draft",
                    "featured": False,
                }
            ]
        }
    )

    title: str = Field(default="", max_length=300)
    content: str = Field(default="")
    excerpt: str = Field(default="", max_length=1000)
    author: str = Field(default="", max_length=200)
    tags: list[str] | str | None = None
    status: str = Field(default="draft", max_length=20)
    featured: bool = False
    imageUrl: str = Field(default="", max_length=2000)
    metaDescription: str = Field(default="", max_length=500)


class PostUpdateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=300)
    content: str | None = None
    excerpt: str | None = Field(default=None, max_length=1000)
    author: str | None = Field(default=None, max_length=200)
    tags: list[str] | str | None = None
    status: str | None = Field(default=None, max_length=20)
    featured: bool | None = None
    imageUrl: str | None = Field(default=None, max_length=2000)
    metaDescription: str | None = Field(default=None, max_length=500)


class StatusPatchRequest(BaseModel):
    status: str = Field(min_length=1, max_length=40)


class ImageUploadRequest(BaseModel):
    """Base64 encoded image (a data: URL prefix is accepted)."""

    filename: str = Field(min_length=1, max_length=255)
    content_type: str = Field(min_length=1, max_length=100)
    data_base64: str = Field(min_length=1)


class WebsiteContentRequest(BaseModel):
    type: str = Field(max_length=40)
    title: str = Field(default="", max_length=300)
    content: str = ""
    isActive: bool = True
    order: int = 0


class WebsiteContentUpdateRequest(BaseModel):
    type: str | None = Field(default=None, max_length=40)
    title: str | None = Field(default=None, max_length=300)
    content: str | None = None
    isActive: bool | None = None
    order: int | None = None


class ToolCreateRequest(BaseModel):
    name: str = Field(default="", max_length=120)
    description: str = Field(default="", max_length=1000)
    category: str = Field(default="other", max_length=40)
    icon: str = Field(default="", max_length=100)
    route: str = Field(default="", max_length=200)
    slug: str | None = Field(default=None, max_length=120)
    isActive: bool = True
    isPremium: bool = False
    features: list[str] = Field(default_factory=list)


class ToolUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=1000)
    category: str | None = Field(default=None, max_length=40)
    icon: str | None = Field(default=None, max_length=100)
    route: str | None = Field(default=None, max_length=200)
    isActive: bool | None = None
    isPremium: bool | None = None
    features: list[str] | None = None


class ToolToggleRequest(BaseModel):
    field: str = Field(default="isActive", pattern="^(isActive|isPremium)$")


class BulkToolStatusRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=500)
    isActive: bool


class MessagePatchRequest(BaseModel):
    status: str | None = Field(default=None, max_length=20)
    priority: str | None = Field(default=None, max_length=20)


class ReplyRequest(BaseModel):
    reply: str = Field(default="", max_length=10_000)


class SettingsSectionRequest(BaseModel):
    values: dict[str, Any]


class PolicyToggleRequest(BaseModel):
    enabled: bool | None = None


# =============================================================================
# Response Models
# =============================================================================


class PageResponse(BaseModel):
    """Filtered, paginated list."""

    model_config = ConfigDict(extra="allow")

    total: int
    limit: int
    offset: int
    items: list[dict[str, Any]]


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: float
    admin: dict[str, Any]


class NotificationsResponse(BaseModel):
    count: int
    badge: str | None
    items: list[dict[str, Any]]
    more_count: int
    more_label: str | None


class ClickResponse(BaseModel):
    notification_id: str
    marked_read: bool
    navigate_to: str | None
    dropdown_open: bool
    error: str | None = None

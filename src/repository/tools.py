"""
AI tool catalog.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config import TOOL_CATEGORIES
from src.filtering import filter_documents
from src.repository.base import CollectionRepo
from src.security.validators import clean_text, require_fields, validate_choice
from src.store import SERVER_TIMESTAMP, Increment
from src.store import collections as col

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "description", "category")


def _tool(slug: str, name: str, description: str, category: str, icon: str, *, premium: bool = False, features=()) -> dict[str, Any]:
    return {
        "slug": slug,
        "name": name,
        "description": description,
        "category": category,
        "icon": icon,
        "route": f"/tools/{slug}",
        "isActive": True,
        "isPremium": premium,
        "usageCount": 0,
        "features": list(features),
    }


DEFAULT_TOOLS: tuple[dict[str, Any], ...] = (
    _tool(
        "image-enhancer",
        "Image Enhancer",
        "Enhance image quality with AI-powered upscaling and noise reduction",
        "image",
        "image",
        features=("Upscaling", "Noise reduction"),
    ),
    _tool(
        "face-swapper",
        "AI Face Swapper",
        "Swap faces in photos using advanced AI face detection technology",
        "image",
        "users",
        premium=True,
        features=("Face detection", "Blending"),
    ),
    _tool(
        "pdf-compressor",
        "PDF Compressor",
        "Compress PDF files while maintaining quality and readability",
        "pdf",
        "file-text",
    ),
    _tool(
        "resume-builder",
        "Resume Builder",
        "Create professional resumes with AI-powered content suggestions",
        "document",
        "user",
        features=("Templates", "Content suggestions"),
    ),
    _tool(
        "instagram-caption",
        "Instagram Caption Generator",
        "Generate engaging captions for your Instagram posts with hashtags",
        "social",
        "instagram",
    ),
    _tool(
        "youtube-thumbnail",
        "YouTube Thumbnail Generator",
        "Create eye-catching thumbnails for your YouTube videos",
        "video",
        "youtube",
    ),
    _tool(
        "article-writer",
        "AI Article Writer",
        "Generate high-quality articles with AI-powered content creation",
        "writing",
        "pen-tool",
        premium=True,
    ),
    _tool("merge-pdf", "Merge PDF", "Combine several PDF files into one document", "pdf", "files"),
    _tool("split-pdf", "Split PDF", "Extract pages or page ranges from a PDF", "pdf", "scissors"),
    _tool("pdf-to-word", "PDF to Word", "Convert PDF documents to editable Word files", "pdf", "file-text"),
    _tool("word-to-pdf", "Word to PDF", "Convert Word documents to PDF", "document", "file"),
    _tool("jpg-to-pdf", "JPG to PDF", "Turn images into a single PDF", "pdf", "image"),
    _tool("pdf-to-jpg", "PDF to JPG", "Export PDF pages as JPG images", "pdf", "image"),
    _tool("unlock-pdf", "Unlock PDF", "Remove password protection from PDFs you own", "pdf", "unlock"),
)


class ToolRepo(CollectionRepo):
    collection = col.AI_TOOLS

    def seed_defaults(self) -> int:
        """Insert the default catalog when the collection is empty."""
        if self.count() > 0:
            return 0
        batch = self.store.batch()
        for tool in DEFAULT_TOOLS:
            batch.set(
                self.collection,
                tool["slug"],
                {**tool, "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
            )
        batch.commit()
        logger.info("Seeded %d default tools", len(DEFAULT_TOOLS))
        return len(DEFAULT_TOOLS)

    def list_tools(self) -> list[dict[str, Any]]:
        self.seed_defaults()
        return self.list(order_by="name", descending=False)

    def search(
        self,
        q: str | None = None,
        *,
        category: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        equals: dict[str, Any] = {"category": category}
        if status in ("active", "inactive"):
            equals["isActive"] = status == "active"
        return filter_documents(self.list_tools(), q, SEARCH_FIELDS, equals)

    def list_active(self, category: str | None = None) -> list[dict[str, Any]]:
        tools = [t for t in self.list_tools() if t.get("isActive", True)]
        return filter_documents(tools, None, (), {"category": category})

    def create_tool(self, data: dict[str, Any]) -> dict[str, Any]:
        require_fields(data, ("name", "description"))
        category = data.get("category") or "other"
        validate_choice(category, TOOL_CATEGORIES, field="category")
        name = clean_text(data["name"], max_length=120)
        slug = data.get("slug") or "-".join(name.lower().split())
        tool = {
            "slug": slug,
            "name": name,
            "description": clean_text(data["description"], max_length=1000),
            "category": category,
            "icon": data.get("icon") or "",
            "route": data.get("route") or f"/tools/{slug}",
            "isActive": bool(data.get("isActive", True)),
            "isPremium": bool(data.get("isPremium", False)),
            "usageCount": 0,
            "features": [str(f) for f in data.get("features") or []],
        }
        tool_id = self.create(tool)
        return self.require(tool_id)

    def update_tool(self, tool_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self.require(tool_id)
        fields: dict[str, Any] = {}
        if "category" in data and data["category"]:
            fields["category"] = validate_choice(data["category"], TOOL_CATEGORIES, field="category")
        for key in ("name", "description"):
            if key in data:
                require_fields(data, (key,))
                fields[key] = clean_text(data[key], max_length=1000)
        for key in ("icon", "route"):
            if key in data:
                fields[key] = data[key] or ""
        for key in ("isActive", "isPremium"):
            if key in data:
                fields[key] = bool(data[key])
        if "features" in data:
            fields["features"] = [str(f) for f in data["features"] or []]
        return self.update(tool_id, fields) if fields else self.require(tool_id)

    def toggle_active(self, tool_id: str) -> dict[str, Any]:
        tool = self.require(tool_id)
        return self.update(tool_id, {"isActive": not tool.get("isActive", True)})

    def toggle_premium(self, tool_id: str) -> dict[str, Any]:
        tool = self.require(tool_id)
        return self.update(tool_id, {"isPremium": not tool.get("isPremium", False)})

    def bulk_set_status(self, tool_ids: list[str], is_active: bool) -> int:
        """Set isActive on every listed tool in one batch; unknown ids fail the whole batch."""
        ids = list(dict.fromkeys(t for t in tool_ids if t))
        if not ids:
            return 0
        batch = self.store.batch()
        for tool_id in ids:
            batch.update(self.collection, tool_id, {"isActive": bool(is_active), "updatedAt": SERVER_TIMESTAMP})
        batch.commit()
        return len(ids)

    def increment_usage(self, tool_id: str) -> None:
        self.store.update(self.collection, tool_id, {"usageCount": Increment(1)})

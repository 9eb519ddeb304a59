"""
Editable website sections (hero, about, features, testimonials, footer).
"""

from __future__ import annotations

from typing import Any

from src.config import WEBSITE_CONTENT_TYPES
from src.repository.base import CollectionRepo
from src.security.validators import clean_text, require_fields, validate_choice
from src.store import collections as col


class WebsiteContentRepo(CollectionRepo):
    collection = col.WEBSITE_CONTENT

    def list_sections(self, type: str | None = None, *, active_only: bool = False) -> list[dict[str, Any]]:
        where = []
        if type and type != "all":
            where.append(("type", "==", type))
        if active_only:
            where.append(("isActive", "==", True))
        return self.list(where=where, order_by="order", descending=False)

    def create_section(self, data: dict[str, Any]) -> dict[str, Any]:
        require_fields(data, ("type", "title"))
        validate_choice(data["type"], WEBSITE_CONTENT_TYPES, field="type")
        section_id = self.create(
            {
                "type": data["type"],
                "title": clean_text(data["title"], max_length=300),
                "content": str(data.get("content") or ""),
                "isActive": bool(data.get("isActive", True)),
                "order": int(data.get("order") or 0),
            }
        )
        return self.require(section_id)

    def update_section(self, section_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self.require(section_id)
        fields: dict[str, Any] = {}
        if "type" in data:
            fields["type"] = validate_choice(data["type"], WEBSITE_CONTENT_TYPES, field="type")
        if "title" in data:
            require_fields(data, ("title",))
            fields["title"] = clean_text(data["title"], max_length=300)
        if "content" in data:
            fields["content"] = str(data["content"] or "")
        if "isActive" in data:
            fields["isActive"] = bool(data["isActive"])
        if "order" in data:
            fields["order"] = int(data["order"] or 0)
        return self.update(section_id, fields) if fields else self.require(section_id)

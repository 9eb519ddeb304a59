"""
Blog posts.

Posts are composed in full on create: the excerpt is derived from the
content when left blank, tags arrive either as a list or as the
comma-separated string the editor form produces, and counters start at 0.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config import BLOG_STATUSES, settings
from src.filtering import filter_documents
from src.repository.base import CollectionRepo
from src.security.validators import clean_text, require_fields, validate_choice
from src.store import SERVER_TIMESTAMP, Increment
from src.store import collections as col

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "content", "author")
PUBLIC_SEARCH_FIELDS = ("title", "excerpt", "tags")


def parse_tags(tags: str | list[str] | None) -> list[str]:
    if tags is None:
        return []
    items = tags.split(",") if isinstance(tags, str) else list(tags)
    return [t.strip() for t in items if t and t.strip()]


def make_excerpt(content: str, excerpt: str | None = None, length: int | None = None) -> str:
    """Use the given excerpt verbatim, or the first ``length`` characters of content plus "..."."""
    if excerpt:
        return excerpt
    n = settings.excerpt_length if length is None else length
    return content[:n] + "..."


class BlogPostRepo(CollectionRepo):
    collection = col.BLOG_POSTS

    def create_post(self, data: dict[str, Any], *, author: str = "", author_id: str = "") -> dict[str, Any]:
        require_fields(data, ("title", "content"))
        status = data.get("status") or "draft"
        validate_choice(status, BLOG_STATUSES, field="status")

        title = clean_text(data["title"], max_length=300)
        content = str(data["content"])
        post = {
            "title": title,
            "content": content,
            "excerpt": make_excerpt(content, data.get("excerpt")),
            "author": data.get("author") or author or "Admin",
            "authorId": author_id,
            "status": status,
            "tags": parse_tags(data.get("tags")),
            "featured": bool(data.get("featured", False)),
            "imageUrl": data.get("imageUrl") or "",
            "metaDescription": clean_text(data.get("metaDescription"), max_length=500),
            "views": 0,
            "likes": 0,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        if status == "published":
            post["publishedAt"] = SERVER_TIMESTAMP
        post_id = self.store.add(self.collection, post)
        logger.info("Created blog post %s (%s)", post_id, status)
        return self.require(post_id)

    def update_post(self, post_id: str, data: dict[str, Any]) -> dict[str, Any]:
        current = self.require(post_id)
        fields: dict[str, Any] = {}
        if "title" in data:
            require_fields(data, ("title",))
            fields["title"] = clean_text(data["title"], max_length=300)
        if "content" in data:
            require_fields(data, ("content",))
            fields["content"] = str(data["content"])
        if "excerpt" in data:
            content = fields.get("content", current.get("content", ""))
            fields["excerpt"] = make_excerpt(content, data["excerpt"])
        if "tags" in data:
            fields["tags"] = parse_tags(data["tags"])
        for key in ("author", "imageUrl"):
            if key in data:
                fields[key] = data[key] or ""
        if "metaDescription" in data:
            fields["metaDescription"] = clean_text(data["metaDescription"], max_length=500)
        if "featured" in data:
            fields["featured"] = bool(data["featured"])
        if "status" in data and data["status"]:
            fields.update(self._status_fields(current, data["status"]))
        if not fields:
            return current
        return self.update(post_id, fields)

    def set_status(self, post_id: str, status: str) -> dict[str, Any]:
        current = self.require(post_id)
        return self.update(post_id, self._status_fields(current, status))

    @staticmethod
    def _status_fields(current: dict[str, Any], status: str) -> dict[str, Any]:
        validate_choice(status, BLOG_STATUSES, field="status")
        fields: dict[str, Any] = {"status": status}
        if status == "published" and current.get("status") != "published":
            fields["publishedAt"] = SERVER_TIMESTAMP
        return fields

    def search(self, q: str | None = None, *, status: str | None = None) -> list[dict[str, Any]]:
        return filter_documents(self.list(), q, SEARCH_FIELDS, {"status": status})

    def list_published(self, q: str | None = None, *, tag: str | None = None) -> list[dict[str, Any]]:
        posts = self.store.query(
            self.collection,
            where=[("status", "==", "published")],
            order_by="publishedAt",
            descending=True,
        )
        if tag:
            posts = [p for p in posts if tag in (p.get("tags") or [])]
        return filter_documents(posts, q, PUBLIC_SEARCH_FIELDS)

    def get_published(self, post_id: str) -> dict[str, Any] | None:
        post = self.get(post_id)
        if post is None or post.get("status") != "published":
            return None
        return post

    def increment_views(self, post_id: str) -> None:
        self.store.update(self.collection, post_id, {"views": Increment(1)})

    def like(self, post_id: str) -> dict[str, Any]:
        self.store.update(self.collection, post_id, {"likes": Increment(1)})
        return self.require(post_id)

"""
User repository: site users and their per-tool usage records.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config import USER_ROLES
from src.exceptions import DocumentNotFoundError
from src.filtering import filter_documents
from src.repository.base import CollectionRepo
from src.security.validators import validate_choice
from src.store import SERVER_TIMESTAMP, Increment
from src.store import collections as col

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("email", "displayName")


class UserRepo(CollectionRepo):
    """
    Users are keyed by the identity provider uid. Usage records live in
    ``toolUsage`` with one document per (userId, toolName).
    """

    collection = col.USERS

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def upsert_profile(
        self,
        uid: str,
        *,
        email: str,
        display_name: str = "",
        provider: str = "email",
        photo_url: str = "",
    ) -> dict[str, Any]:
        """
        Create the profile on first sign-in, otherwise refresh lastLoginAt.
        Admin-managed fields (role, isActive, isPremium) are never reset here.
        """
        existing = self.get(uid)
        if existing is None:
            self.store.set(
                self.collection,
                uid,
                {
                    "uid": uid,
                    "email": email,
                    "displayName": display_name,
                    "photoURL": photo_url,
                    "provider": provider,
                    "role": "user",
                    "isActive": True,
                    "isPremium": False,
                    "createdAt": SERVER_TIMESTAMP,
                    "lastLoginAt": SERVER_TIMESTAMP,
                },
            )
            logger.info("Created user profile %s", uid)
        else:
            updates: dict[str, Any] = {"lastLoginAt": SERVER_TIMESTAMP}
            if display_name:
                updates["displayName"] = display_name
            if photo_url:
                updates["photoURL"] = photo_url
            self.store.set(self.collection, uid, updates, merge=True)
        return self.require(uid)

    def update_profile(self, uid: str, fields: dict[str, Any]) -> dict[str, Any]:
        allowed = {k: v for k, v in fields.items() if k in {"displayName", "photoURL", "preferences"}}
        return self.update(uid, allowed)

    # -------------------------------------------------------------------------
    # Admin list + single-field toggles
    # -------------------------------------------------------------------------

    def search(
        self,
        q: str | None = None,
        *,
        status: str | None = None,
        role: str | None = None,
        premium: bool | None = None,
    ) -> list[dict[str, Any]]:
        users = self.list(order_by="createdAt", descending=True)
        equals: dict[str, Any] = {"role": role}
        if status in ("active", "inactive"):
            equals["isActive"] = status == "active"
        if premium is not None:
            equals["isPremium"] = bool(premium)
        # Legacy profiles carry no isActive flag; they count as active.
        for user in users:
            user.setdefault("isActive", True)
            user.setdefault("isPremium", False)
        return filter_documents(users, q, SEARCH_FIELDS, equals)

    def set_status(self, uid: str, is_active: bool) -> dict[str, Any]:
        return self.update(uid, {"isActive": bool(is_active)})

    def set_premium(self, uid: str, is_premium: bool) -> dict[str, Any]:
        return self.update(uid, {"isPremium": bool(is_premium)})

    def set_role(self, uid: str, role: str) -> dict[str, Any]:
        validate_choice(role, USER_ROLES, field="role")
        return self.update(uid, {"role": role})

    # -------------------------------------------------------------------------
    # Deletion (cascades to toolUsage)
    # -------------------------------------------------------------------------

    def delete_user(self, uid: str) -> int:
        """
        Delete the user and every toolUsage document with ``userId == uid``
        in one atomic batch. Returns the number of usage records removed.
        """
        if self.get(uid) is None:
            raise DocumentNotFoundError(self.collection, uid)
        usage = self.store.query(col.TOOL_USAGE, where=[("userId", "==", uid)])
        batch = self.store.batch()
        batch.delete(self.collection, uid)
        for record in usage:
            batch.delete(col.TOOL_USAGE, record["id"])
        batch.commit()
        logger.info("Deleted user %s and %d usage records", uid, len(usage))
        return len(usage)

    def bulk_delete(self, uids: list[str]) -> int:
        """Delete several users (with their usage records) atomically."""
        wanted = {u for u in uids if u}
        if not wanted:
            return 0
        usage = self.store.query(col.TOOL_USAGE, where=[("userId", "in", list(wanted))])
        batch = self.store.batch()
        for uid in sorted(wanted):
            batch.delete(self.collection, uid)
        for record in usage:
            batch.delete(col.TOOL_USAGE, record["id"])
        batch.commit()
        return len(wanted)

    # -------------------------------------------------------------------------
    # Tool usage
    # -------------------------------------------------------------------------

    def track_tool_usage(self, uid: str, tool_name: str) -> dict[str, Any]:
        """Increment the (user, tool) usage record, creating it on first use."""
        existing = self.store.query(
            col.TOOL_USAGE,
            where=[("userId", "==", uid), ("toolName", "==", tool_name)],
            limit=1,
        )
        if existing:
            record_id = existing[0]["id"]
            self.store.update(
                col.TOOL_USAGE,
                record_id,
                {"usageCount": Increment(1), "lastUsed": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
            )
        else:
            record_id = self.store.add(
                col.TOOL_USAGE,
                {
                    "userId": uid,
                    "toolName": tool_name,
                    "usageCount": 1,
                    "lastUsed": SERVER_TIMESTAMP,
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        return self.store.get(col.TOOL_USAGE, record_id) or {}

    def get_tool_usage(self, uid: str) -> list[dict[str, Any]]:
        return self.store.query(col.TOOL_USAGE, where=[("userId", "==", uid)], order_by="lastUsed", descending=True)

    def popular_tools(self, limit: int = 10) -> list[dict[str, Any]]:
        """Aggregate usage across all users, most used first."""
        totals: dict[str, int] = {}
        for record in self.store.query(col.TOOL_USAGE):
            name = record.get("toolName")
            if not name:
                continue
            totals[name] = totals.get(name, 0) + int(record.get("usageCount") or 0)
        ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
        return [{"toolName": name, "totalUsage": total} for name, total in ranked[: max(0, limit)]]

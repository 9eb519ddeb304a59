"""
Admin accounts for the back-office.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config import ADMIN_ROLES, MODERATOR_PERMISSIONS, PERMISSIONS
from src.exceptions import ValidationError
from src.repository.base import CollectionRepo
from src.security.passwords import hash_password
from src.security.validators import validate_choice, validate_email
from src.store import SERVER_TIMESTAMP
from src.store import collections as col

logger = logging.getLogger(__name__)

ALL_PERMISSIONS = "all"


def normalize_permissions(role: str, permissions: list[str] | None) -> list[str]:
    """Default permissions per role; unknown permission names are rejected."""
    if permissions is None:
        if role == "super_admin":
            return [ALL_PERMISSIONS]
        if role == "moderator":
            return list(MODERATOR_PERMISSIONS)
        return sorted(PERMISSIONS - {"admins.manage"})
    unknown = [p for p in permissions if p != ALL_PERMISSIONS and p not in PERMISSIONS]
    if unknown:
        raise ValidationError("Unknown permission", field="permissions", detail=", ".join(unknown))
    return list(dict.fromkeys(permissions))


def public_admin(admin: dict[str, Any]) -> dict[str, Any]:
    """Strip credential fields before an admin record leaves the server."""
    return {k: v for k, v in admin.items() if k != "passwordHash"}


class AdminRepo(CollectionRepo):
    collection = col.ADMINS

    def create_admin(
        self,
        email: str,
        password: str,
        *,
        role: str = "admin",
        display_name: str = "",
        permissions: list[str] | None = None,
        uid: str | None = None,
    ) -> dict[str, Any]:
        email = validate_email(email)
        validate_choice(role, ADMIN_ROLES, field="role")
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters", field="password")
        if self.get_by_email(email) is not None:
            raise ValidationError("An admin with this email already exists", field="email")

        data = {
            "email": email,
            "displayName": display_name or email.split("@", 1)[0],
            "role": role,
            "permissions": normalize_permissions(role, permissions),
            "isActive": True,
            "passwordHash": hash_password(password),
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
            "lastActive": None,
        }
        if uid:
            self.store.set(self.collection, uid, {**data, "uid": uid})
            admin_id = uid
        else:
            admin_id = self.store.add(self.collection, data)
            self.store.update(self.collection, admin_id, {"uid": admin_id})
        logger.info("Created admin %s with role %s", admin_id, role)
        return self.require(admin_id)

    def get_by_email(self, email: str) -> dict[str, Any] | None:
        matches = self.store.query(self.collection, where=[("email", "==", (email or "").strip().lower())], limit=1)
        return matches[0] if matches else None

    def set_password(self, admin_id: str, password: str) -> dict[str, Any]:
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters", field="password")
        return self.update(admin_id, {"passwordHash": hash_password(password)})

    def set_role(self, admin_id: str, role: str, permissions: list[str] | None = None) -> dict[str, Any]:
        validate_choice(role, ADMIN_ROLES, field="role")
        return self.update(admin_id, {"role": role, "permissions": normalize_permissions(role, permissions)})

    def set_permissions(self, admin_id: str, permissions: list[str]) -> dict[str, Any]:
        admin = self.require(admin_id)
        return self.update(admin_id, {"permissions": normalize_permissions(admin.get("role", "admin"), permissions)})

    def set_status(self, admin_id: str, is_active: bool) -> dict[str, Any]:
        return self.update(admin_id, {"isActive": bool(is_active)})

    def touch(self, admin_id: str) -> None:
        self.store.update(self.collection, admin_id, {"lastActive": SERVER_TIMESTAMP})

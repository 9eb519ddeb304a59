"""
Admin authentication: credential check, bearer sessions and permissions.

Sessions are opaque random tokens held in process memory with a TTL.
A token maps to an ``AdminSession`` carrying the admin's role and
permissions as they were at login time.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.config import settings
from src.exceptions import AuthenticationError, PermissionDeniedError
from src.repository.admins import ALL_PERMISSIONS, AdminRepo
from src.repository.security import SecurityRepo
from src.security.passwords import verify_password

logger = logging.getLogger(__name__)


@dataclass
class AdminSession:
    token: str
    admin_id: str
    email: str
    role: str
    permissions: tuple[str, ...] = ()
    display_name: str = ""
    created_at: float = field(default_factory=time.time)
    expires_at: float = 0.0

    @property
    def expired(self) -> bool:
        return time.time() >= self.expires_at

    def has_permission(self, permission: str) -> bool:
        if self.role == "super_admin" or ALL_PERMISSIONS in self.permissions:
            return True
        return permission in self.permissions

    def require(self, permission: str) -> None:
        if not self.has_permission(permission):
            raise PermissionDeniedError(permission)

    def to_dict(self) -> dict[str, Any]:
        return {
            "admin_id": self.admin_id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role,
            "permissions": list(self.permissions),
            "expires_at": self.expires_at,
        }


class SessionStore:
    """
    Thread-safe token -> AdminSession map.

    Expired sessions are removed when read and by ``prune_expired``, which
    runs on every login and every authenticated request.
    """

    def __init__(self, ttl_seconds: float | None = None) -> None:
        self.ttl_seconds = float(ttl_seconds if ttl_seconds is not None else settings.session_ttl_hours * 3600)
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()
        self._on_revoke: list[Callable[[AdminSession], None]] = []

    def on_revoke(self, callback: Callable[[AdminSession], None]) -> None:
        """Register a callback run whenever a session is revoked or expires."""
        self._on_revoke.append(callback)

    def issue(self, admin: dict[str, Any]) -> AdminSession:
        self.prune_expired()
        now = time.time()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            admin_id=admin["id"],
            email=admin.get("email", ""),
            role=admin.get("role", "admin"),
            permissions=tuple(admin.get("permissions") or ()),
            display_name=admin.get("displayName", ""),
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._sessions[session.token] = session
        return session

    def get(self, token: str) -> AdminSession | None:
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is not None and session.expired:
                del self._sessions[token]
            else:
                return session
        self._fire_revoke(session)
        return None

    def revoke(self, token: str) -> bool:
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return False
        self._fire_revoke(session)
        return True

    def revoke_admin(self, admin_id: str) -> int:
        """Revoke every session belonging to ``admin_id``."""
        with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.admin_id == admin_id]
            removed = [self._sessions.pop(t) for t in tokens]
        for session in removed:
            self._fire_revoke(session)
        return len(removed)

    def prune_expired(self) -> int:
        """Drop every expired session, firing the revoke callbacks for each."""
        with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.expired]
            removed = [self._sessions.pop(t) for t in tokens]
        for session in removed:
            self._fire_revoke(session)
        return len(removed)

    def active_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._sessions.values() if not s.expired)

    def _fire_revoke(self, session: AdminSession) -> None:
        for callback in self._on_revoke:
            try:
                callback(session)
            except Exception:
                logger.exception("Session revoke callback failed for admin %s", session.admin_id)


class AdminAuthenticator:
    """Checks admin credentials and issues sessions."""

    def __init__(self, admins: AdminRepo, sessions: SessionStore, security: SecurityRepo | None = None) -> None:
        self.admins = admins
        self.sessions = sessions
        self.security = security

    def login(self, email: str, password: str, *, client_ip: str = "") -> AdminSession:
        admin = self.admins.get_by_email(email)
        if admin is None or not verify_password(password or "", admin.get("passwordHash", "")):
            self._record_failure(email, client_ip)
            raise AuthenticationError("Invalid email or password")
        if not admin.get("isActive", True):
            self._record_failure(email, client_ip)
            raise AuthenticationError("Admin account is disabled")

        self.admins.touch(admin["id"])
        session = self.sessions.issue(admin)
        logger.info("Admin %s logged in", admin["id"], extra={"admin_id": admin["id"]})
        return session

    def logout(self, token: str) -> bool:
        return self.sessions.revoke(token)

    def authenticate(self, token: str) -> AdminSession:
        self.sessions.prune_expired()
        session = self.sessions.get(token)
        if session is None:
            raise AuthenticationError("Invalid or expired session")
        return session

    def _record_failure(self, email: str, client_ip: str) -> None:
        logger.warning("Failed admin login for %s", email, extra={"client_ip": client_ip})
        if self.security is not None:
            self.security.record_failed_login(email, client_ip)


def parse_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return ""
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()

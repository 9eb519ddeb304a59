"""
Security policy toggles and the security event log.
"""

from __future__ import annotations

import logging
from typing import Any

from src.config import SECURITY_EVENT_STATUSES, SECURITY_SEVERITIES
from src.exceptions import NotFoundError
from src.filtering import filter_documents
from src.repository.base import CollectionRepo
from src.repository.settings import SETTINGS_DOC_ID, SiteSettingsRepo
from src.security.validators import clean_text, validate_choice
from src.store import SERVER_TIMESTAMP
from src.store import collections as col

logger = logging.getLogger(__name__)

EVENT_TYPES = frozenset({"failed_login", "suspicious_activity", "admin_access", "data_export"})
SEARCH_FIELDS = ("description", "ip", "location", "type")


class SecurityRepo(CollectionRepo):
    """Events live in ``security_events``; policies in ``site_settings/main``."""

    collection = col.SECURITY_EVENTS

    def __init__(self, store, site_settings: SiteSettingsRepo | None = None) -> None:
        super().__init__(store)
        self.site_settings = site_settings or SiteSettingsRepo(store)

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    def list_policies(self) -> list[dict[str, Any]]:
        policies = self.site_settings.get_settings()["security"].get("policies", {})
        return [{"id": pid, **policy} for pid, policy in policies.items()]

    def toggle_policy(self, policy_id: str, enabled: bool | None = None) -> dict[str, Any]:
        """Flip (or set) one policy's ``enabled`` flag."""
        current = {p["id"]: p for p in self.list_policies()}
        if policy_id not in current:
            raise NotFoundError(f"Security policy not found: {policy_id}", detail=policy_id)
        value = (not current[policy_id].get("enabled", False)) if enabled is None else bool(enabled)

        self.site_settings.ensure_defaults()
        self.store.update(
            col.SITE_SETTINGS,
            SETTINGS_DOC_ID,
            {
                f"security.policies.{policy_id}": {**{k: v for k, v in current[policy_id].items() if k != "id"}, "enabled": value},
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info("Security policy %s set to %s", policy_id, value)
        return {**current[policy_id], "enabled": value}

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def record_event(
        self,
        type: str,
        description: str,
        *,
        severity: str = "low",
        ip: str = "",
        location: str = "Unknown",
        status: str = "investigating",
    ) -> str:
        validate_choice(type, EVENT_TYPES, field="type")
        validate_choice(severity, SECURITY_SEVERITIES, field="severity")
        validate_choice(status, SECURITY_EVENT_STATUSES, field="status")
        return self.store.add(
            self.collection,
            {
                "type": type,
                "severity": severity,
                "description": clean_text(description, max_length=500),
                "ip": ip or "",
                "location": location,
                "timestamp": SERVER_TIMESTAMP,
                "status": status,
            },
        )

    def record_failed_login(self, email: str, ip: str = "") -> str:
        return self.record_event(
            "failed_login",
            f"Failed admin login for {email}",
            severity="medium",
            ip=ip,
        )

    def list_events(
        self,
        q: str | None = None,
        *,
        severity: str | None = None,
        status: str | None = None,
        type: str | None = None,
    ) -> list[dict[str, Any]]:
        events = self.list(order_by="timestamp", descending=True)
        return filter_documents(events, q, SEARCH_FIELDS, {"severity": severity, "status": status, "type": type})

    def set_event_status(self, event_id: str, status: str) -> dict[str, Any]:
        validate_choice(status, SECURITY_EVENT_STATUSES, field="status")
        self.store.update(self.collection, event_id, {"status": status})
        return self.require(event_id)

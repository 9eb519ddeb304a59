"""
Site settings: a single document ``site_settings/main``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from src.exceptions import ValidationError
from src.repository.base import CollectionRepo
from src.store import SERVER_TIMESTAMP
from src.store import collections as col
from src.store.documents import deep_merge

logger = logging.getLogger(__name__)

SETTINGS_DOC_ID = "main"

DEFAULT_SECURITY_POLICIES: dict[str, dict[str, Any]] = {
    "two_factor": {
        "name": "Two-Factor Authentication",
        "description": "Require 2FA for all admin accounts",
        "enabled": True,
    },
    "ip_whitelist": {
        "name": "IP Whitelisting",
        "description": "Only allow access from approved IP addresses",
        "enabled": False,
    },
    "session_timeout": {
        "name": "Session Timeout",
        "description": "Automatically log out inactive users",
        "enabled": True,
    },
    "login_monitoring": {
        "name": "Login Monitoring",
        "description": "Monitor and alert on suspicious login patterns",
        "enabled": True,
    },
    "api_rate_limiting": {
        "name": "API Rate Limiting",
        "description": "Limit API requests per user/IP",
        "enabled": True,
    },
    "data_encryption": {
        "name": "Data Encryption",
        "description": "Encrypt sensitive data at rest",
        "enabled": True,
    },
}

DEFAULT_SITE_SETTINGS: dict[str, Any] = {
    "siteName": "AI Tools Hub",
    "siteDescription": "Free AI-powered tools for images, documents and content",
    "siteUrl": "https://aitoolshub.com",
    "contactEmail": "contact@aitoolshub.com",
    "supportEmail": "support@aitoolshub.com",
    "maintenanceMode": False,
    "registrationEnabled": True,
    "emailVerificationRequired": False,
    "maxFileSize": 10,
    "allowedFileTypes": ["jpg", "jpeg", "png", "pdf", "doc", "docx"],
    "theme": {
        "primaryColor": "#8B5CF6",
        "secondaryColor": "#3B82F6",
        "darkMode": False,
    },
    "notifications": {
        "emailNotifications": True,
        "pushNotifications": False,
        "marketingEmails": False,
    },
    "security": {
        "passwordMinLength": 8,
        "requireStrongPassword": True,
        "sessionTimeout": 24,
        "maxLoginAttempts": 5,
        "policies": DEFAULT_SECURITY_POLICIES,
    },
    "analytics": {
        "googleAnalyticsId": "",
        "trackingEnabled": False,
    },
}

SECTIONS = ("theme", "notifications", "security", "analytics")

# Fields safe to expose on the public site endpoint
PUBLIC_FIELDS = ("siteName", "siteDescription", "siteUrl", "contactEmail", "supportEmail", "maintenanceMode", "registrationEnabled", "theme")


def default_settings() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_SITE_SETTINGS)


class SiteSettingsRepo(CollectionRepo):
    collection = col.SITE_SETTINGS

    def get_settings(self) -> dict[str, Any]:
        """Stored settings deep-merged over the defaults."""
        stored = self.get(SETTINGS_DOC_ID) or {}
        stored.pop("id", None)
        return deep_merge(default_settings(), stored)

    def public_settings(self) -> dict[str, Any]:
        current = self.get_settings()
        return {k: current[k] for k in PUBLIC_FIELDS if k in current}

    def replace(self, data: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(data, dict) or not data:
            raise ValidationError("Settings payload must be a non-empty object", field="settings")
        payload = {k: v for k, v in data.items() if k not in ("id", "updatedAt")}
        self.store.set(self.collection, SETTINGS_DOC_ID, {**payload, "updatedAt": SERVER_TIMESTAMP})
        logger.info("Site settings replaced")
        return self.get_settings()

    def update_section(self, section: str, values: dict[str, Any]) -> dict[str, Any]:
        if section not in SECTIONS:
            raise ValidationError(f"Unknown settings section: {section}", field="section")
        self.store.set(
            self.collection,
            SETTINGS_DOC_ID,
            {section: values, "updatedAt": SERVER_TIMESTAMP},
            merge=True,
        )
        return self.get_settings()

    def reset(self) -> dict[str, Any]:
        self.store.set(self.collection, SETTINGS_DOC_ID, {**default_settings(), "updatedAt": SERVER_TIMESTAMP})
        logger.info("Site settings reset to defaults")
        return self.get_settings()

    def ensure_defaults(self) -> bool:
        """Write the default document if none exists. Returns True when written."""
        if self.get(SETTINGS_DOC_ID) is not None:
            return False
        self.store.set(self.collection, SETTINGS_DOC_ID, {**default_settings(), "updatedAt": SERVER_TIMESTAMP})
        return True

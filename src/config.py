"""
AI Tools Hub - Configuration Management
=======================================
Centralized configuration with environment variable support.

Usage:
    from src.config import settings

    db_path = settings.db_path
    page_size = settings.default_page_size
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings with environment variable overrides."""

    # Paths
    db_path: Path = field(default_factory=lambda: Path("data/hub.db"))
    storage_path: Path = field(default_factory=lambda: Path("data/storage"))
    storage_base_url: str = "/files"

    # Uploads
    max_image_bytes: int = 5 * 1024 * 1024
    allowed_image_types: set[str] = field(
        default_factory=lambda: {"image/png", "image/jpeg", "image/gif", "image/webp"}
    )

    # Admin sessions
    session_ttl_hours: int = 24
    default_admin_email: str = "admin@aitoolshub.com"
    default_admin_password: str = "admin123"

    # Listing
    default_page_size: int = 20
    max_page_size: int = 200

    # Notifications bell
    notification_dropdown_limit: int = 5
    notification_badge_cap: int = 9

    # Blog
    excerpt_length: int = 200

    # Reverse proxy / client IP extraction
    trust_proxy_headers: bool = False
    trusted_proxy_ips: set[str] = field(default_factory=set)

    # CORS configuration
    # Example: CORS_ALLOW_ORIGINS="https://aitoolshub.com,https://admin.aitoolshub.com"
    cors_allow_origins: set[str] = field(
        default_factory=lambda: {
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:8501",  # Streamlit default
            "http://127.0.0.1",
            "http://127.0.0.1:8501",
        }
    )
    cors_allow_credentials: bool = False
    cors_max_age: int = 600  # 10 minutes

    # Site
    site_base_url: str = "https://aitoolshub.com"
    site_name: str = "AI Tools Hub"

    # Admin console
    api_url: str = "http://localhost:8000"

    debug_mode: bool = False

    def __post_init__(self):
        """Load overrides from environment variables."""
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration from environment variables."""
        # Paths
        if db_path := os.environ.get("HUB_DB_PATH"):
            self.db_path = Path(db_path)
        if storage_path := os.environ.get("HUB_STORAGE_PATH"):
            self.storage_path = Path(storage_path)
        if base_url := os.environ.get("HUB_STORAGE_BASE_URL"):
            self.storage_base_url = base_url.rstrip("/")

        # Uploads
        if max_image := os.environ.get("MAX_IMAGE_BYTES"):
            self.max_image_bytes = int(max_image)

        # Sessions / default admin
        if ttl := os.environ.get("SESSION_TTL_HOURS"):
            self.session_ttl_hours = int(ttl)
        if admin_email := os.environ.get("ADMIN_EMAIL"):
            self.default_admin_email = admin_email
        if admin_password := os.environ.get("ADMIN_PASSWORD"):
            self.default_admin_password = admin_password

        # Listing
        if page_size := os.environ.get("DEFAULT_PAGE_SIZE"):
            self.default_page_size = int(page_size)

        # Reverse proxy / headers
        if os.environ.get("TRUST_PROXY_HEADERS", "").lower() in ("1", "true", "yes"):
            self.trust_proxy_headers = True
        if trusted := os.environ.get("TRUSTED_PROXY_IPS", "").strip():
            self.trusted_proxy_ips = {ip.strip() for ip in trusted.split(",") if ip.strip()}

        # CORS configuration
        if cors_origins := os.environ.get("CORS_ALLOW_ORIGINS", "").strip():
            if cors_origins == "*":
                logger.warning(
                    "CORS_ALLOW_ORIGINS set to '*' - allowing all origins. " "This should only be used in development."
                )
                self.cors_allow_origins = {"*"}
            else:
                self.cors_allow_origins = {origin.strip() for origin in cors_origins.split(",") if origin.strip()}
        if cors_max_age := os.environ.get("CORS_MAX_AGE"):
            self.cors_max_age = int(cors_max_age)

        # Site
        if base_url := os.environ.get("SITE_BASE_URL"):
            self.site_base_url = base_url
        if site_name := os.environ.get("SITE_NAME"):
            self.site_name = site_name

        if api_url := os.environ.get("HUB_API_URL"):
            self.api_url = api_url.rstrip("/")

        if os.environ.get("DEBUG", "").lower() in ("1", "true"):
            self.debug_mode = True


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
        if _settings.debug_mode:
            logger.info("Settings loaded with debug mode enabled")
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings


# Convenience alias
settings = get_settings()


# Domain constants
BLOG_STATUSES = frozenset({"draft", "published", "archived"})

MESSAGE_STATUSES = frozenset({"unread", "read", "replied"})

MESSAGE_PRIORITIES = frozenset({"low", "normal", "high", "urgent"})

USER_ROLES = frozenset({"user", "admin", "moderator"})

ADMIN_ROLES = frozenset({"super_admin", "admin", "moderator"})

SECURITY_EVENT_STATUSES = frozenset({"blocked", "investigating", "resolved", "approved"})

SECURITY_SEVERITIES = frozenset({"low", "medium", "high"})

WEBSITE_CONTENT_TYPES = frozenset({"hero", "about", "features", "testimonials", "footer"})

TOOL_CATEGORIES = frozenset(
    {
        "image",
        "pdf",
        "document",
        "writing",
        "social",
        "video",
        "other",
    }
)

PERMISSIONS = frozenset(
    {
        "dashboard.view",
        "users.view",
        "users.manage",
        "content.view",
        "content.manage",
        "tools.view",
        "tools.manage",
        "messages.view",
        "messages.manage",
        "analytics.view",
        "settings.view",
        "settings.manage",
        "security.manage",
        "admins.manage",
    }
)

# Permission granted to moderators when no explicit list is given
MODERATOR_PERMISSIONS = (
    "dashboard.view",
    "content.view",
    "content.manage",
    "messages.view",
    "messages.manage",
)

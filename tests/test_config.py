"""
Tests for settings and environment overrides (src.config).
"""

from __future__ import annotations

from pathlib import Path

from src.config import Settings, reload_settings


def test_defaults():
    s = Settings()
    assert s.db_path == Path("data/hub.db")
    assert s.notification_badge_cap == 9
    assert s.notification_dropdown_limit == 5
    assert s.excerpt_length == 200
    assert "image/png" in s.allowed_image_types


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("HUB_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("SESSION_TTL_HOURS", "2")
    monkeypatch.setenv("ADMIN_EMAIL", "ops@aitoolshub.com")
    monkeypatch.setenv("TRUST_PROXY_HEADERS", "yes")
    monkeypatch.setenv("TRUSTED_PROXY_IPS", "10.0.0.1, 10.0.0.2")
    monkeypatch.setenv("HUB_API_URL", "http://api.internal:9000/")
    s = Settings()
    assert s.db_path == tmp_path / "x.db"
    assert s.session_ttl_hours == 2
    assert s.default_admin_email == "ops@aitoolshub.com"
    assert s.trust_proxy_headers is True
    assert s.trusted_proxy_ips == {"10.0.0.1", "10.0.0.2"}
    assert s.api_url == "http://api.internal:9000"


def test_cors_origins(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://aitoolshub.com, https://admin.aitoolshub.com")
    assert Settings().cors_allow_origins == {"https://aitoolshub.com", "https://admin.aitoolshub.com"}

    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "*")
    assert Settings().cors_allow_origins == {"*"}


def test_reload_settings_returns_fresh_instance(monkeypatch):
    monkeypatch.setenv("SITE_NAME", "Tools R Us")
    try:
        assert reload_settings().site_name == "Tools R Us"
    finally:
        monkeypatch.delenv("SITE_NAME")
        reload_settings()

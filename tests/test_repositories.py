"""
Tests for the collection repositories (src.repository.*).
"""

from __future__ import annotations

import logging
import sqlite3
from unittest import mock

import pytest

from src.exceptions import (
    DatabaseError,
    DocumentNotFoundError,
    MissingRequiredFieldError,
    NotFoundError,
    ValidationError,
)
from src.repository import SecurityRepo, SiteSettingsRepo, ToolRepo, WebsiteContentRepo
from src.repository.posts import make_excerpt, parse_tags
from src.repository.tools import DEFAULT_TOOLS
from src.store import collections as col


# =============================================================================
# Users
# =============================================================================


class TestUserRepo:
    def test_upsert_creates_profile_with_defaults(self, users):
        profile = users.upsert_profile("u1", email="a@x.com", display_name="Ann", provider="google")
        assert profile["role"] == "user"
        assert profile["isActive"] is True
        assert profile["isPremium"] is False
        assert profile["provider"] == "google"
        assert profile["createdAt"] == profile["lastLoginAt"]

    def test_upsert_keeps_admin_managed_fields(self, users):
        users.upsert_profile("u1", email="a@x.com")
        users.set_premium("u1", True)
        users.set_role("u1", "moderator")
        again = users.upsert_profile("u1", email="a@x.com", display_name="New")
        assert again["isPremium"] is True
        assert again["role"] == "moderator"
        assert again["displayName"] == "New"

    def test_set_role_rejects_unknown(self, users):
        users.upsert_profile("u1", email="a@x.com")
        with pytest.raises(ValidationError):
            users.set_role("u1", "owner")

    def test_search_treats_missing_flags_as_active_non_premium(self, users, store):
        store.set(col.USERS, "legacy", {"email": "old@x.com"})
        users.upsert_profile("u2", email="new@x.com")
        users.set_status("u2", False)
        active = users.search(status="active")
        assert [u["id"] for u in active] == ["legacy"]
        assert [u["id"] for u in users.search(premium=False)] == ["u2", "legacy"]

    def test_track_usage_increments_single_record(self, users):
        users.track_tool_usage("u1", "PDF Compressor")
        record = users.track_tool_usage("u1", "PDF Compressor")
        assert record["usageCount"] == 2
        assert len(users.get_tool_usage("u1")) == 1

    def test_popular_tools_aggregates_across_users(self, users):
        for uid in ("a", "b"):
            users.track_tool_usage(uid, "Merge PDF")
        users.track_tool_usage("a", "Split PDF")
        assert users.popular_tools(limit=1) == [{"toolName": "Merge PDF", "totalUsage": 2}]

    def test_delete_user_cascades_to_usage(self, users, store):
        users.upsert_profile("u1", email="a@x.com")
        users.upsert_profile("u2", email="b@x.com")
        users.track_tool_usage("u1", "Merge PDF")
        users.track_tool_usage("u1", "Split PDF")
        users.track_tool_usage("u2", "Merge PDF")

        assert users.delete_user("u1") == 2
        assert users.get("u1") is None
        remaining = store.query(col.TOOL_USAGE)
        assert [r["userId"] for r in remaining] == ["u2"]

    def test_delete_user_is_all_or_nothing(self, users, store):
        users.upsert_profile("u1", email="a@x.com")
        users.track_tool_usage("u1", "Merge PDF")
        real_apply = store._apply_op
        applied = []

        def flaky_apply(conn, op, now):
            applied.append(op)
            if len(applied) == 2:
                raise sqlite3.OperationalError("disk I/O error")
            return real_apply(conn, op, now)

        with mock.patch.object(store, "_apply_op", side_effect=flaky_apply):
            with pytest.raises(DatabaseError):
                users.delete_user("u1")
        assert users.get("u1") is not None
        assert len(users.get_tool_usage("u1")) == 1

    def test_delete_unknown_user_raises(self, users):
        with pytest.raises(DocumentNotFoundError):
            users.delete_user("ghost")

    def test_bulk_delete(self, users, store):
        for uid in ("a", "b", "c"):
            users.upsert_profile(uid, email=f"{uid}@x.com")
            users.track_tool_usage(uid, "Merge PDF")
        assert users.bulk_delete(["a", "b"]) == 2
        assert [u["id"] for u in users.list()] == ["c"]
        assert [r["userId"] for r in store.query(col.TOOL_USAGE)] == ["c"]


# =============================================================================
# Blog posts
# =============================================================================


class TestBlogPostRepo:
    def test_empty_excerpt_is_first_200_chars_plus_ellipsis(self, posts):
        content = "x" * 250
        post = posts.create_post({"title": "T", "content": content, "excerpt": ""})
        assert post["excerpt"] == "x" * 200 + "..."

    def test_supplied_excerpt_is_kept_verbatim(self, posts):
        post = posts.create_post({"title": "T", "content": "body", "excerpt": "  padded summary "})
        assert post["excerpt"] == "  padded summary "
        assert make_excerpt("body", "   ") == "   "

    def test_short_content_still_gets_ellipsis(self):
        assert make_excerpt("short") == "short..."
        assert make_excerpt("body", "Custom") == "Custom"

    def test_create_defaults(self, posts):
        post = posts.create_post({"title": "T", "content": "C", "tags": "ai, pdf ,"}, author="Root", author_id="a1")
        assert post["status"] == "draft"
        assert post["views"] == 0 and post["likes"] == 0
        assert post["tags"] == ["ai", "pdf"]
        assert post["author"] == "Root"
        assert "publishedAt" not in post

    def test_required_fields(self, posts):
        with pytest.raises(MissingRequiredFieldError):
            posts.create_post({"title": " ", "content": "C"})
        with pytest.raises(MissingRequiredFieldError):
            posts.create_post({"title": "T", "content": ""})

    def test_publishing_stamps_published_at_once(self, posts):
        post = posts.create_post({"title": "T", "content": "C"})
        published = posts.set_status(post["id"], "published")
        assert published["publishedAt"]
        again = posts.update_post(post["id"], {"status": "published", "title": "T2"})
        assert again["publishedAt"] == published["publishedAt"]

    def test_update_recomputes_excerpt_only_when_given(self, posts):
        post = posts.create_post({"title": "T", "content": "old", "excerpt": "keep me"})
        updated = posts.update_post(post["id"], {"content": "new body"})
        assert updated["excerpt"] == "keep me"
        updated = posts.update_post(post["id"], {"excerpt": ""})
        assert updated["excerpt"] == "new body..."

    def test_public_listing_only_published(self, posts):
        draft = posts.create_post({"title": "Draft", "content": "C"})
        live = posts.create_post({"title": "Live", "content": "C", "status": "published", "tags": ["ai"]})
        assert [p["id"] for p in posts.list_published()] == [live["id"]]
        assert posts.list_published(tag="pdf") == []
        assert posts.get_published(draft["id"]) is None

    def test_views_and_likes(self, posts):
        post = posts.create_post({"title": "T", "content": "C", "status": "published"})
        posts.increment_views(post["id"])
        posts.increment_views(post["id"])
        assert posts.like(post["id"])["likes"] == 1
        assert posts.require(post["id"])["views"] == 2

    def test_parse_tags(self):
        assert parse_tags(None) == []
        assert parse_tags([" a ", "", "b"]) == ["a", "b"]


# =============================================================================
# Contact messages + notifications
# =============================================================================


class TestContactMessages:
    def test_submit_stores_message_and_notification(self, messages, notifications, contact_form):
        message = messages.submit(contact_form)
        assert message["status"] == "unread"
        assert message["priority"] == "normal"
        assert message["isRead"] is False

        unread = notifications.list_unread()
        assert len(unread) == 1
        n = unread[0]
        assert n["type"] == "contact_form"
        assert n["title"] == "New Contact Form Submission"
        assert n["message"] == "New message from Jo (jo@x.com)"
        assert n["data"] == {"contactId": message["id"], "subject": "Hi", "inquiryType": "general"}
        assert n["isRead"] is False

    def test_notification_failure_keeps_message(self, messages, notifications, contact_form, caplog):
        with mock.patch.object(notifications, "create_notification", side_effect=DatabaseError(operation="add")):
            with caplog.at_level(logging.ERROR, logger="error"):
                message = messages.submit(contact_form)
        assert messages.get(message["id"]) is not None
        assert notifications.list_unread() == []
        record = next(r for r in caplog.records if r.getMessage() == "contact_notification_failed")
        assert record.contact_id == message["id"]

    @pytest.mark.parametrize("missing", ["name", "email", "subject", "message"])
    def test_missing_field_writes_nothing(self, messages, notifications, contact_form, missing):
        contact_form[missing] = "   "
        with pytest.raises(ValidationError):
            messages.submit(contact_form)
        assert messages.count() == 0
        assert notifications.count() == 0

    def test_invalid_email_rejected(self, messages, contact_form):
        contact_form["email"] = "not-an-email"
        with pytest.raises(ValidationError):
            messages.submit(contact_form)

    def test_reply_and_status(self, messages, contact_form):
        message = messages.submit(contact_form)
        replied = messages.reply(message["id"], "Thanks!", replied_by="root@aitoolshub.com")
        assert replied["status"] == "replied"
        assert replied["repliedBy"] == "root@aitoolshub.com"
        assert messages.set_priority(message["id"], "high")["priority"] == "high"
        with pytest.raises(ValidationError):
            messages.set_status(message["id"], "archived")

    def test_mark_all_read(self, notifications):
        for i in range(3):
            notifications.create_notification("contact_form", "t", f"m{i}")
        assert notifications.mark_all_read() == 3
        assert notifications.list_unread() == []
        assert notifications.mark_all_read() == 0

    def test_mark_read_unknown_raises(self, notifications):
        with pytest.raises(DocumentNotFoundError):
            notifications.mark_read("ghost")


# =============================================================================
# Admins
# =============================================================================


class TestAdminRepo:
    def test_create_normalizes_email_and_permissions(self, admins):
        admin = admins.create_admin("Boss@X.com", "secret1", role="super_admin")
        assert admin["email"] == "boss@x.com"
        assert admin["permissions"] == ["all"]
        assert admin["uid"] == admin["id"]
        assert admins.get_by_email("BOSS@x.com")["id"] == admin["id"]

    def test_moderator_defaults(self, admins):
        mod = admins.create_admin("mod@x.com", "secret1", role="moderator")
        assert "users.manage" not in mod["permissions"]
        assert "messages.view" in mod["permissions"]

    def test_duplicate_email_rejected(self, admins):
        admins.create_admin("a@x.com", "secret1")
        with pytest.raises(ValidationError):
            admins.create_admin("A@x.com", "secret2")

    def test_short_password_and_unknown_permission(self, admins):
        with pytest.raises(ValidationError):
            admins.create_admin("a@x.com", "123")
        with pytest.raises(ValidationError):
            admins.create_admin("b@x.com", "secret1", permissions=["launch.rockets"])


# =============================================================================
# Tools, settings, security, website content
# =============================================================================


class TestToolRepo:
    def test_seeds_default_catalog_once(self, store):
        tools = ToolRepo(store)
        listed = tools.list_tools()
        assert len(listed) == len(DEFAULT_TOOLS)
        assert tools.seed_defaults() == 0
        assert tools.get("merge-pdf")["category"] == "pdf"

    def test_toggles_and_bulk_status(self, store):
        tools = ToolRepo(store)
        tools.seed_defaults()
        assert tools.toggle_premium("merge-pdf")["isPremium"] is True
        assert tools.bulk_set_status(["merge-pdf", "split-pdf"], False) == 2
        active_ids = {t["id"] for t in tools.list_active()}
        assert "merge-pdf" not in active_ids and "split-pdf" not in active_ids

    def test_bulk_status_unknown_id_changes_nothing(self, store):
        tools = ToolRepo(store)
        tools.seed_defaults()
        with pytest.raises(DocumentNotFoundError):
            tools.bulk_set_status(["merge-pdf", "ghost"], False)
        assert tools.get("merge-pdf")["isActive"] is True

    def test_create_tool_validates_category(self, store):
        tools = ToolRepo(store)
        with pytest.raises(ValidationError):
            tools.create_tool({"name": "X", "description": "Y", "category": "weapons"})
        tool = tools.create_tool({"name": "Audio Cleaner", "description": "Y", "category": "other"})
        assert tool["slug"] == "audio-cleaner"
        assert tool["route"] == "/tools/audio-cleaner"


class TestSiteSettingsAndSecurity:
    def test_defaults_merge_over_stored(self, store):
        repo = SiteSettingsRepo(store)
        repo.update_section("theme", {"primaryColor": "#000000"})
        current = repo.get_settings()
        assert current["theme"]["primaryColor"] == "#000000"
        assert current["theme"]["secondaryColor"] == "#3B82F6"
        assert current["siteName"] == "AI Tools Hub"

    def test_reset_restores_defaults(self, store):
        repo = SiteSettingsRepo(store)
        repo.update_section("theme", {"darkMode": True})
        assert repo.reset()["theme"]["darkMode"] is False

    def test_public_settings_hide_security(self, store):
        public = SiteSettingsRepo(store).public_settings()
        assert "security" not in public
        assert public["siteName"] == "AI Tools Hub"

    def test_toggle_policy_flips_and_persists(self, store):
        security = SecurityRepo(store)
        before = {p["id"]: p["enabled"] for p in security.list_policies()}
        toggled = security.toggle_policy("ip_whitelist")
        assert toggled["enabled"] is (not before["ip_whitelist"])
        after = {p["id"]: p["enabled"] for p in security.list_policies()}
        assert after["ip_whitelist"] is (not before["ip_whitelist"])
        assert after["two_factor"] == before["two_factor"]

    def test_toggle_unknown_policy(self, store):
        with pytest.raises(NotFoundError):
            SecurityRepo(store).toggle_policy("laser_grid")

    def test_events_filter_and_status(self, store):
        security = SecurityRepo(store)
        security.record_failed_login("a@x.com", "1.2.3.4")
        event_id = security.record_event("suspicious_activity", "Odd traffic", severity="high")
        assert [e["id"] for e in security.list_events(severity="high")] == [event_id]
        assert len(security.list_events(q="1.2.3.4")) == 1
        assert security.set_event_status(event_id, "blocked")["status"] == "blocked"
        with pytest.raises(ValidationError):
            security.record_event("alien_event", "x")


class TestWebsiteContent:
    def test_sections_ordered_and_filtered(self, store):
        content = WebsiteContentRepo(store)
        content.create_section({"type": "features", "title": "B", "order": 2})
        content.create_section({"type": "features", "title": "A", "order": 1})
        hidden = content.create_section({"type": "hero", "title": "H", "isActive": False})
        assert [s["title"] for s in content.list_sections("features")] == ["A", "B"]
        assert hidden["id"] not in {s["id"] for s in content.list_sections(active_only=True)}
        with pytest.raises(ValidationError):
            content.create_section({"type": "sidebar", "title": "X"})

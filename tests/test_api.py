"""
Tests for the FastAPI backend (src.api).

These tests stay offline and run against a temp document store.
"""

from __future__ import annotations

import base64
import json

ADMIN_EMAIL = "root@aitoolshub.com"
ADMIN_PASSWORD = "correct-horse"


def _contact(client, **overrides):
    body = {"name": "Jo", "email": "jo@x.com", "subject": "Hi", "message": "Hello", **overrides}
    return client.post("/v1/contact", json=body)


# =============================================================================
# Health + error envelope
# =============================================================================


def test_health(client):
    resp = client.get("/v1/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers["Cache-Control"] == "no-store"
    assert resp.headers.get("X-Request-ID")


def test_caller_request_id_is_echoed(client):
    resp = client.get("/v1/health", headers={"X-Request-ID": "req-42"})
    assert resp.headers["X-Request-ID"] == "req-42"


def test_redact_query_hides_credentials():
    from src.api.observability import redact_query

    assert redact_query("q=jo&password=pw&limit=5") == "q=jo&password=***&limit=5"


def test_validation_error_envelope(client):
    resp = client.post("/v1/contact", json={"name": "Jo"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "validation_error"
    assert resp.headers.get("X-Request-ID")


def test_security_headers(client):
    resp = client.get("/v1/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


# =============================================================================
# Public site
# =============================================================================


def test_public_tools_seeded_and_inactive_hidden(client, app_state):
    resp = client.get("/v1/tools")
    assert resp.status_code == 200
    ids = {t["id"] for t in resp.json()["items"]}
    assert "merge-pdf" in ids

    app_state.tools.toggle_active("merge-pdf")
    ids = {t["id"] for t in client.get("/v1/tools").json()["items"]}
    assert "merge-pdf" not in ids
    assert client.get("/v1/tools/merge-pdf").status_code == 404


def test_contact_submission_creates_message_and_notification(client, app_state):
    resp = _contact(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "unread"

    stored = app_state.messages.require(body["id"])
    assert stored["subject"] == "Hi"
    unread = app_state.notifications.list_unread()
    assert unread[0]["message"] == "New message from Jo (jo@x.com)"
    assert unread[0]["data"]["contactId"] == body["id"]


def test_contact_blank_field_rejected_without_writes(client, app_state):
    resp = _contact(client, subject="   ")
    assert resp.status_code == 400
    assert app_state.messages.count() == 0
    assert app_state.notifications.count() == 0


def test_blog_public_flow(client, app_state):
    post = app_state.posts.create_post({"title": "Live", "content": "Body", "status": "published", "tags": "ai"})
    app_state.posts.create_post({"title": "Draft", "content": "Body"})

    listing = client.get("/v1/blog").json()
    assert listing["total"] == 1
    assert listing["items"][0]["id"] == post["id"]

    detail = client.get(f"/v1/blog/{post['id']}").json()
    assert detail["views"] == 1
    assert client.post(f"/v1/blog/{post['id']}/like").json()["likes"] == 1
    assert client.get("/v1/blog/not-there").status_code == 404


def test_user_profile_sync_and_usage(client):
    headers = {"X-User-ID": "uid-1"}
    resp = client.put("/v1/users/me", json={"email": "ann@x.com", "displayName": "Ann"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "user"

    resp = client.post("/v1/tools/merge-pdf/usage", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["usageCount"] == 1
    usage = client.get("/v1/users/me/usage", headers=headers).json()
    assert usage["items"][0]["toolName"] == "Merge PDF"

    assert client.get("/v1/users/me/usage").status_code == 400


def test_user_profile_get_and_patch(client):
    headers = {"X-User-ID": "uid-2"}
    assert client.get("/v1/users/me", headers=headers).status_code == 404

    client.put("/v1/users/me", json={"email": "bo@x.com", "displayName": "Bo"}, headers=headers)
    resp = client.patch(
        "/v1/users/me",
        json={"displayName": "Bobby", "preferences": {"theme": "dark"}},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["displayName"] == "Bobby"

    profile = client.get("/v1/users/me", headers=headers).json()
    assert profile["preferences"] == {"theme": "dark"}
    assert profile["email"] == "bo@x.com"


def test_site_info_is_public_subset(client):
    body = client.get("/v1/site").json()
    assert body["siteName"] == "AI Tools Hub"
    assert "security" not in body


# =============================================================================
# Admin auth + permissions
# =============================================================================


def test_admin_routes_require_token(client):
    resp = client.get("/v1/admin/users")
    assert resp.status_code == 401
    assert resp.json()["error"] == "authentication_error"
    assert "Bearer" in resp.headers.get("WWW-Authenticate", "")


def test_login_logout(client, super_admin):
    resp = client.post("/v1/admin/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert "passwordHash" not in body["admin"]
    headers = {"Authorization": f"Bearer {body['token']}"}

    me = client.get("/v1/admin/auth/me", headers=headers).json()
    assert me["role"] == "super_admin"

    assert client.post("/v1/admin/auth/logout", headers=headers).json()["ok"] is True
    assert client.get("/v1/admin/auth/me", headers=headers).status_code == 401


def test_bad_login_is_401_and_logged_as_security_event(client, super_admin, app_state):
    resp = client.post("/v1/admin/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    assert resp.status_code == 401
    assert app_state.security.list_events(type="failed_login")


def test_moderator_forbidden_from_users(client, login_as):
    headers = login_as("mod@aitoolshub.com", role="moderator")
    resp = client.get("/v1/admin/users", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "permission_denied"
    assert client.get("/v1/admin/messages", headers=headers).status_code == 200


def test_deactivating_admin_revokes_sessions(client, admin_headers, login_as, app_state):
    other = login_as("ops@aitoolshub.com")
    admin = app_state.admins.get_by_email("ops@aitoolshub.com")
    resp = client.patch(f"/v1/admin/admins/{admin['id']}", json={"isActive": False}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["isActive"] is False
    assert client.get("/v1/admin/auth/me", headers=other).status_code == 401


# =============================================================================
# Admin lists + mutations
# =============================================================================


def test_users_list_filter_and_delete(client, admin_headers, app_state):
    for i in range(3):
        app_state.users.upsert_profile(f"u{i}", email=f"user{i}@x.com")
    app_state.users.set_status("u1", False)
    app_state.users.track_tool_usage("u0", "Merge PDF")

    page = client.get("/v1/admin/users", params={"limit": 2}, headers=admin_headers).json()
    assert page["total"] == 3
    assert len(page["items"]) == 2

    inactive = client.get("/v1/admin/users", params={"status": "inactive"}, headers=admin_headers).json()
    assert [u["id"] for u in inactive["items"]] == ["u1"]

    unconfirmed = client.delete("/v1/admin/users/u0", headers=admin_headers)
    assert unconfirmed.status_code == 409
    assert unconfirmed.json()["error"] == "confirmation_required"
    assert app_state.users.get("u0") is not None

    resp = client.delete("/v1/admin/users/u0", params={"confirm": "true"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["tool_usage_deleted"] == 1
    assert app_state.users.get("u0") is None


def test_user_patch_single_field(client, admin_headers, app_state):
    app_state.users.upsert_profile("u1", email="a@x.com")
    resp = client.patch("/v1/admin/users/u1", json={"isPremium": True}, headers=admin_headers)
    assert resp.json()["isPremium"] is True
    assert resp.json()["isActive"] is True
    assert client.patch("/v1/admin/users/u1", json={"role": "owner"}, headers=admin_headers).status_code == 400
    assert client.patch("/v1/admin/users/ghost", json={"isPremium": True}, headers=admin_headers).status_code == 404


def test_users_csv_export(client, admin_headers, app_state):
    app_state.users.upsert_profile("u1", email="a@x.com", display_name="Ann")
    resp = client.get("/v1/admin/users/export.csv", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("uid,email,displayName")
    assert lines[1].startswith("u1,a@x.com,Ann")


def test_post_crud_and_excerpt(client, admin_headers):
    resp = client.post(
        "/v1/admin/posts",
        json={"title": "Hello", "content": "y" * 300, "tags": "ai, pdf"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    post = resp.json()
    assert post["excerpt"] == "y" * 200 + "..."
    assert post["author"] == "Root"

    resp = client.patch(f"/v1/admin/posts/{post['id']}/status", json={"status": "published"}, headers=admin_headers)
    assert resp.json()["publishedAt"]

    listing = client.get("/v1/admin/posts", params={"q": "hello", "status": "published"}, headers=admin_headers)
    assert listing.json()["total"] == 1

    assert client.delete(f"/v1/admin/posts/{post['id']}", headers=admin_headers).status_code == 409
    assert client.delete(f"/v1/admin/posts/{post['id']}", params={"confirm": True}, headers=admin_headers).status_code == 200


def test_blog_image_upload_and_serve(client, admin_headers):
    data = b"\x89PNG\r\n\x1a\nfake"
    resp = client.post(
        "/v1/admin/uploads/blog-image",
        json={"filename": "cover art.png", "content_type": "image/png", "data_base64": base64.b64encode(data).decode()},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["path"].startswith("blog-images/")
    assert body["path"].endswith("-cover-art.png")

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == data


def test_blog_image_upload_rejects_non_image(client, admin_headers):
    resp = client.post(
        "/v1/admin/uploads/blog-image",
        json={"filename": "x.pdf", "content_type": "application/pdf", "data_base64": "AAAA"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_tools_admin(client, admin_headers):
    page = client.get("/v1/admin/tools", params={"category": "pdf"}, headers=admin_headers).json()
    assert page["total"] > 0
    assert all(t["category"] == "pdf" for t in page["items"])

    resp = client.post("/v1/admin/tools/merge-pdf/toggle", json={"field": "isPremium"}, headers=admin_headers)
    assert resp.json()["isPremium"] is True

    resp = client.post(
        "/v1/admin/tools/bulk-status", json={"ids": ["merge-pdf", "split-pdf"], "isActive": False}, headers=admin_headers
    )
    assert resp.json()["updated"] == 2
    inactive = client.get("/v1/admin/tools", params={"status": "inactive"}, headers=admin_headers).json()
    assert {t["id"] for t in inactive["items"]} == {"merge-pdf", "split-pdf"}


def test_messages_inbox(client, admin_headers):
    message_id = _contact(client).json()["id"]
    listing = client.get("/v1/admin/messages", params={"status": "unread"}, headers=admin_headers).json()
    assert [m["id"] for m in listing["items"]] == [message_id]

    resp = client.post(f"/v1/admin/messages/{message_id}/reply", json={"reply": "Thanks"}, headers=admin_headers)
    assert resp.json()["status"] == "replied"
    assert resp.json()["repliedBy"] == ADMIN_EMAIL

    resp = client.patch(f"/v1/admin/messages/{message_id}", json={"priority": "urgent"}, headers=admin_headers)
    assert resp.json()["priority"] == "urgent"


def test_settings_sections_and_reset(client, admin_headers):
    resp = client.patch("/v1/admin/settings/theme", json={"values": {"darkMode": True}}, headers=admin_headers)
    assert resp.json()["theme"]["darkMode"] is True
    assert client.patch("/v1/admin/settings/bogus", json={"values": {}}, headers=admin_headers).status_code == 400

    assert client.post("/v1/admin/settings/reset", headers=admin_headers).status_code == 409
    resp = client.post("/v1/admin/settings/reset", params={"confirm": "true"}, headers=admin_headers)
    assert resp.json()["theme"]["darkMode"] is False


def test_security_policies_and_export(client, admin_headers):
    policies = client.get("/v1/admin/security/policies", headers=admin_headers).json()["items"]
    assert {p["id"] for p in policies} >= {"two_factor", "ip_whitelist"}

    resp = client.post("/v1/admin/security/policies/ip_whitelist/toggle", json={"enabled": True}, headers=admin_headers)
    assert resp.json()["enabled"] is True
    assert client.post("/v1/admin/security/policies/nope/toggle", headers=admin_headers).status_code == 404

    resp = client.get("/v1/admin/security/events/export.csv", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.text.startswith("id,timestamp,type")
    events = client.get("/v1/admin/security/events", params={"type": "data_export"}, headers=admin_headers).json()
    assert events["total"] == 1


def test_analytics_overview(client, admin_headers, app_state):
    app_state.users.upsert_profile("u1", email="a@x.com")
    body = client.get("/v1/admin/analytics/overview", params={"range": "30d"}, headers=admin_headers).json()
    assert body["users"]["totalUsers"] == 1
    assert body["traffic"]["stub"] is True
    assert body["traffic"]["timeRange"] == "30d"

    export = client.get("/v1/admin/analytics/export.json", headers=admin_headers)
    assert json.loads(export.text)["users"]["totalUsers"] == 1


# =============================================================================
# Notification bell
# =============================================================================


def test_notification_bell_and_click(client, admin_headers):
    for i in range(7):
        _contact(client, name=f"P{i}")
    bell = client.get("/v1/admin/notifications", headers=admin_headers).json()
    assert bell["count"] == 7
    assert bell["badge"] == "7"
    assert len(bell["items"]) == 5
    assert bell["more_label"] == "+2 more"

    first = bell["items"][0]["id"]
    click = client.post(f"/v1/admin/notifications/{first}/click", headers=admin_headers).json()
    assert click == {
        "notification_id": first,
        "marked_read": True,
        "navigate_to": "/admin/messages",
        "dropdown_open": False,
        "error": None,
    }
    assert client.get("/v1/admin/notifications", headers=admin_headers).json()["count"] == 6

    assert client.post("/v1/admin/notifications/read-all", headers=admin_headers).json()["updated"] == 6
    assert client.get("/v1/admin/notifications", headers=admin_headers).json()["badge"] is None


def test_notification_badge_caps_at_nine(client, admin_headers):
    for i in range(10):
        _contact(client, name=f"P{i}")
    assert client.get("/v1/admin/notifications", headers=admin_headers).json()["badge"] == "9+"


def test_notification_stream_first_event(client, admin_headers):
    _contact(client)
    with client.stream("GET", "/v1/admin/notifications/stream", params={"max_events": 1}, headers=admin_headers) as resp:
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        text = "".join(resp.iter_text())
    assert "event: notifications" in text
    payload = json.loads(text.split("data: ", 1)[1].split("\n", 1)[0])
    assert payload["count"] == 1
    assert payload["badge"] == "1"

"""
Page renderers for the Streamlit admin console.
"""

from __future__ import annotations

import base64
import logging

import streamlit as st

from src.config import (
    BLOG_STATUSES,
    MESSAGE_PRIORITIES,
    MESSAGE_STATUSES,
    SECURITY_EVENT_STATUSES,
    TOOL_CATEGORIES,
    USER_ROLES,
)
from src.ui.api_client import AdminApiClient, ApiError
from src.ui.components import confirm_delete, render_error, render_list_filters, render_pager
from src.ui.session import login

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


def render_login_page() -> None:
    st.title("Admin sign in")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if not submitted:
        return
    if not email.strip() or not password:
        st.error("Please enter your email and password.")
        return
    try:
        login(email.strip(), password)
    except ApiError as exc:
        logger.warning("Admin sign-in failed: %s", exc)
        st.error("Invalid email or password." if exc.status_code in (400, 401) else f"Failed to sign in. {exc.message}")
        return
    st.rerun()


def render_dashboard(client: AdminApiClient) -> None:
    st.title("Dashboard")
    time_range = st.selectbox("Range", ["7d", "30d", "90d", "1y"])
    try:
        data = client.get("analytics/overview", range=time_range)
    except ApiError as exc:
        render_error("load statistics", exc)
        return

    users, content, tools, messages = data["users"], data["content"], data["tools"], data["messages"]
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Users", users["totalUsers"], f"+{users['newUsersThisWeek']} this week")
    c2.metric("Published posts", content["publishedPosts"], f"{content['draftPosts']} drafts", delta_color="off")
    c3.metric("Tool uses", tools["totalUsage"])
    c4.metric("Unread messages", messages.get("unread", 0))

    if tools["popularTools"]:
        st.subheader("Popular tools")
        st.bar_chart(tools["popularTools"], x="name", y="usage")
    if data["traffic"].get("stub"):
        st.info("Traffic analytics is not connected yet.")

    st.download_button(
        "Export analytics (JSON)",
        data=client.download("analytics/export.json", range=time_range),
        file_name="analytics.json",
        mime="application/json",
    )


def render_users(client: AdminApiClient) -> None:
    st.title("Users")
    q, status = render_list_filters("users", enum_label="Status", enum_options=["active", "inactive"])
    role = st.selectbox("Role", ["all", *sorted(USER_ROLES)], key="users_role")
    try:
        first = client.list("users", q=q, status=status, role=role, limit=PAGE_SIZE, offset=0)
        offset = render_pager("users", first["total"], PAGE_SIZE)
        data = first if offset == 0 else client.list("users", q=q, status=status, role=role, limit=PAGE_SIZE, offset=offset)
    except ApiError as exc:
        render_error("fetch users", exc)
        return

    st.download_button(
        "Export CSV",
        data=client.download("users/export.csv", q=q, status=status, role=role),
        file_name="users.csv",
        mime="text/csv",
    )

    for user in data["items"]:
        with st.expander(f"{user.get('displayName') or user.get('email')} · {user.get('email', '')}"):
            c1, c2, c3 = st.columns(3)
            active = c1.toggle("Active", value=user.get("isActive", True), key=f"u_active_{user['id']}")
            premium = c2.toggle("Premium", value=user.get("isPremium", False), key=f"u_premium_{user['id']}")
            roles = sorted(USER_ROLES)
            role_value = c3.selectbox(
                "Role",
                roles,
                index=roles.index(user.get("role", "user")) if user.get("role", "user") in roles else 0,
                key=f"u_role_{user['id']}",
            )
            changes = {}
            if active != user.get("isActive", True):
                changes["isActive"] = active
            if premium != user.get("isPremium", False):
                changes["isPremium"] = premium
            if role_value != user.get("role", "user"):
                changes["role"] = role_value
            if changes:
                try:
                    client.patch(f"users/{user['id']}", changes)
                except ApiError as exc:
                    render_error("update user", exc)
                else:
                    st.rerun()
            if confirm_delete(client, f"users/{user['id']}", key=f"u_{user['id']}", label="Delete user"):
                st.rerun()


def render_posts(client: AdminApiClient) -> None:
    st.title("Blog posts")
    q, status = render_list_filters("posts", enum_label="Status", enum_options=sorted(BLOG_STATUSES))
    try:
        data = client.list("posts", q=q, status=status, limit=PAGE_SIZE, offset=0)
    except ApiError as exc:
        render_error("fetch posts", exc)
        return

    with st.expander("New post"):
        _render_post_form(client)

    for post in data["items"]:
        with st.expander(f"{post.get('title')} · {post.get('status')} · {post.get('views', 0)} views"):
            st.caption(post.get("excerpt", ""))
            statuses = sorted(BLOG_STATUSES)
            new_status = st.selectbox(
                "Status", statuses, index=statuses.index(post.get("status", "draft")), key=f"p_status_{post['id']}"
            )
            if new_status != post.get("status"):
                try:
                    client.patch(f"posts/{post['id']}/status", {"status": new_status})
                except ApiError as exc:
                    render_error("update post", exc)
                else:
                    st.rerun()
            if confirm_delete(client, f"posts/{post['id']}", key=f"p_{post['id']}", label="Delete post"):
                st.rerun()


def _render_post_form(client: AdminApiClient) -> None:
    with st.form("new_post"):
        title = st.text_input("Title")
        content = st.text_area("Content", height=240)
        excerpt = st.text_area("Excerpt (optional)")
        tags = st.text_input("Tags (comma separated)")
        status = st.selectbox("Status", sorted(BLOG_STATUSES))
        featured = st.checkbox("Featured")
        image = st.file_uploader("Featured image", type=["png", "jpg", "jpeg", "gif", "webp"])
        submitted = st.form_submit_button("Create post")
    if not submitted:
        return
    if not title.strip() or not content.strip():
        st.error("Please fill in title and content")
        return

    image_url = ""
    try:
        if image is not None:
            uploaded = client.post(
                "uploads/blog-image",
                {
                    "filename": image.name,
                    "content_type": image.type,
                    "data_base64": base64.b64encode(image.getvalue()).decode("ascii"),
                },
            )
            image_url = uploaded["url"]
        client.post(
            "posts",
            {
                "title": title,
                "content": content,
                "excerpt": excerpt,
                "tags": tags,
                "status": status,
                "featured": featured,
                "imageUrl": image_url,
            },
        )
    except ApiError as exc:
        render_error("create post", exc)
        return
    st.success("Post created")
    st.rerun()


def render_tools(client: AdminApiClient) -> None:
    st.title("AI tools")
    q, category = render_list_filters("tools", enum_label="Category", enum_options=sorted(TOOL_CATEGORIES))
    try:
        data = client.list("tools", q=q, category=category, limit=200)
    except ApiError as exc:
        render_error("fetch tools", exc)
        return

    selected = []
    for tool in data["items"]:
        c1, c2, c3, c4 = st.columns([4, 1, 1, 1])
        if c1.checkbox(f"{tool['name']} ({tool.get('category')}) · {tool.get('usageCount', 0)} uses", key=f"t_sel_{tool['id']}"):
            selected.append(tool["id"])
        c2.write("Active" if tool.get("isActive") else "Inactive")
        if c3.button("Toggle", key=f"t_toggle_{tool['id']}"):
            try:
                client.post(f"tools/{tool['id']}/toggle", {"field": "isActive"})
            except ApiError as exc:
                render_error("update tool", exc)
            else:
                st.rerun()
        c4.write("Premium" if tool.get("isPremium") else "")

    if selected:
        b1, b2 = st.columns(2)
        for col_, active in ((b1, True), (b2, False)):
            if col_.button(f"{'Activate' if active else 'Deactivate'} {len(selected)} selected"):
                try:
                    client.post("tools/bulk-status", {"ids": selected, "isActive": active})
                except ApiError as exc:
                    render_error("update tools", exc)
                else:
                    st.rerun()


def render_messages(client: AdminApiClient) -> None:
    st.title("Contact messages")
    q, status = render_list_filters("messages", enum_label="Status", enum_options=sorted(MESSAGE_STATUSES))
    try:
        data = client.list("messages", q=q, status=status, limit=PAGE_SIZE, offset=0)
    except ApiError as exc:
        render_error("fetch messages", exc)
        return

    for msg in data["items"]:
        header = f"{'🔵 ' if msg.get('status') == 'unread' else ''}{msg.get('subject')} · {msg.get('name')} <{msg.get('email')}>"
        with st.expander(header):
            st.write(msg.get("message", ""))
            if msg.get("reply"):
                st.info(f"Reply: {msg['reply']}")
            c1, c2 = st.columns(2)
            if msg.get("status") == "unread" and c1.button("Mark as read", key=f"m_read_{msg['id']}"):
                try:
                    client.post(f"messages/{msg['id']}/read")
                except ApiError as exc:
                    render_error("mark message as read", exc)
                else:
                    st.rerun()
            priorities = sorted(MESSAGE_PRIORITIES)
            priority = c2.selectbox(
                "Priority",
                priorities,
                index=priorities.index(msg.get("priority", "normal")),
                key=f"m_prio_{msg['id']}",
            )
            if priority != msg.get("priority", "normal"):
                try:
                    client.patch(f"messages/{msg['id']}", {"priority": priority})
                except ApiError as exc:
                    render_error("update message", exc)
                else:
                    st.rerun()
            reply = st.text_area("Reply", key=f"m_reply_{msg['id']}")
            if st.button("Save reply", key=f"m_send_{msg['id']}"):
                if not reply.strip():
                    st.error("Please write a reply")
                else:
                    try:
                        client.post(f"messages/{msg['id']}/reply", {"reply": reply})
                    except ApiError as exc:
                        render_error("save reply", exc)
                    else:
                        st.rerun()
            if confirm_delete(client, f"messages/{msg['id']}", key=f"m_{msg['id']}", label="Delete message"):
                st.rerun()


def render_settings(client: AdminApiClient) -> None:
    st.title("Settings")
    try:
        current = client.get("settings")
    except ApiError as exc:
        render_error("load settings", exc)
        return

    with st.form("general_settings"):
        site_name = st.text_input("Site name", value=current.get("siteName", ""))
        description = st.text_area("Site description", value=current.get("siteDescription", ""))
        contact = st.text_input("Contact email", value=current.get("contactEmail", ""))
        maintenance = st.checkbox("Maintenance mode", value=current.get("maintenanceMode", False))
        theme = current.get("theme", {})
        primary = st.color_picker("Primary color", value=theme.get("primaryColor", "#8B5CF6"))
        secondary = st.color_picker("Secondary color", value=theme.get("secondaryColor", "#3B82F6"))
        if st.form_submit_button("Save settings"):
            updated = {
                **current,
                "siteName": site_name,
                "siteDescription": description,
                "contactEmail": contact,
                "maintenanceMode": maintenance,
                "theme": {**theme, "primaryColor": primary, "secondaryColor": secondary},
            }
            try:
                client.put("settings", updated)
            except ApiError as exc:
                render_error("save settings", exc)
            else:
                st.success("Settings saved successfully!")

    if st.checkbox("I understand this resets every setting", key="reset_confirm") and st.button("Reset to defaults"):
        try:
            client.post("settings/reset", confirm="true")
        except ApiError as exc:
            render_error("reset settings", exc)
        else:
            st.rerun()


def render_security(client: AdminApiClient) -> None:
    st.title("Security")
    try:
        policies = client.list("security/policies")["items"]
        events = client.list("security/events", limit=100)
    except ApiError as exc:
        render_error("load security data", exc)
        return

    st.subheader("Policies")
    for policy in policies:
        enabled = st.toggle(policy["name"], value=policy.get("enabled", False), help=policy.get("description"), key=f"pol_{policy['id']}")
        if enabled != policy.get("enabled", False):
            try:
                client.post(f"security/policies/{policy['id']}/toggle", {"enabled": enabled})
            except ApiError as exc:
                render_error("update policy", exc)
            else:
                st.rerun()

    st.subheader("Events")
    if events["items"]:
        st.dataframe(events["items"], use_container_width=True)
    else:
        st.caption("No security events recorded.")
    for event in events["items"][:20]:
        statuses = sorted(SECURITY_EVENT_STATUSES)
        current = event.get("status", "investigating")
        new_status = st.selectbox(
            f"{event.get('type')} · {event.get('description', '')}",
            statuses,
            index=statuses.index(current) if current in statuses else 0,
            key=f"ev_{event['id']}",
        )
        if new_status != current:
            try:
                client.patch(f"security/events/{event['id']}", {"status": new_status})
            except ApiError as exc:
                render_error("update event", exc)
            else:
                st.rerun()

    # Each export records a data_export security event.
    if st.button("Prepare security log export"):
        try:
            st.session_state["_security_csv"] = client.download("security/events/export.csv")
        except ApiError as exc:
            render_error("export security log", exc)
    if st.session_state.get("_security_csv"):
        st.download_button(
            "Download security log (CSV)",
            data=st.session_state["_security_csv"],
            file_name="security-log.csv",
            mime="text/csv",
        )


PAGES = {
    "Dashboard": render_dashboard,
    "Users": render_users,
    "Posts": render_posts,
    "Tools": render_tools,
    "Messages": render_messages,
    "Settings": render_settings,
    "Security": render_security,
}

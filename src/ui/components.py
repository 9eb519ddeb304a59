"""
Reusable console widgets: notification bell, list filters, pager, confirm-delete.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import streamlit as st

from src.ui.api_client import AdminApiClient, ApiError
from src.ui.session import handle_auth_error, set_page

logger = logging.getLogger(__name__)

# Console page for each navigation target returned by a notification click
NAVIGATION_PAGES = {"/admin/messages": "Messages"}


def render_error(action: str, exc: ApiError) -> None:
    """Generic "Failed to X" message; details go to the log."""
    logger.error("Failed to %s: %s", action, exc)
    if handle_auth_error(exc):
        st.warning("Your session has expired. Please sign in again.")
        return
    st.error(f"Failed to {action}. {exc.message}")


def render_notification_bell(client: AdminApiClient) -> None:
    try:
        bell = client.notifications()
    except ApiError as exc:
        render_error("load notifications", exc)
        return

    label = f"🔔 {bell['badge']}" if bell.get("badge") else "🔔"
    open_now = st.session_state.get("_dropdown_open", False)
    if st.sidebar.button(label, key="_bell", help="Notifications"):
        open_now = not open_now
        st.session_state["_dropdown_open"] = open_now
    if not open_now:
        return

    box = st.sidebar.container(border=True)
    if not bell["items"]:
        box.caption("No new notifications")
        return
    for n in bell["items"]:
        if box.button(f"**{n.get('title', '')}**  \n{n.get('message', '')}", key=f"_notif_{n['id']}"):
            try:
                result = client.click_notification(n["id"])
            except ApiError as exc:
                render_error("open notification", exc)
                result = {"navigate_to": None}
            st.session_state["_dropdown_open"] = False
            page = NAVIGATION_PAGES.get(result.get("navigate_to") or "")
            if page:
                set_page(page)
            st.rerun()
    if bell.get("more_label"):
        box.caption(bell["more_label"])
    if box.button("Mark all as read", key="_notif_read_all"):
        try:
            client.mark_all_notifications_read()
        except ApiError as exc:
            render_error("mark notifications as read", exc)
        st.session_state["_dropdown_open"] = False
        st.rerun()


def render_list_filters(key: str, *, enum_label: str, enum_options: Sequence[str]) -> tuple[str, str]:
    """Search box plus one enum select; returns (q, enum_value)."""
    col_q, col_enum = st.columns([3, 1])
    q = col_q.text_input("Search", key=f"{key}_q", placeholder="Search…")
    value = col_enum.selectbox(enum_label, ["all", *enum_options], key=f"{key}_enum")
    return q, value


def render_pager(key: str, total: int, page_size: int) -> int:
    """Page selector; returns the offset."""
    pages = max(1, -(-total // page_size))
    page = st.number_input(f"Page (of {pages})", min_value=1, max_value=pages, value=1, key=f"{key}_page")
    st.caption(f"{total} total")
    return (int(page) - 1) * page_size


def confirm_delete(client: AdminApiClient, path: str, *, key: str, label: str = "Delete") -> bool:
    """Two-step delete: a checkbox must be ticked before the button does anything."""
    confirmed = st.checkbox("Confirm", key=f"{key}_confirm")
    if not st.button(label, key=f"{key}_delete", disabled=not confirmed):
        return False
    try:
        client.delete(path, confirm=True)
    except ApiError as exc:
        render_error("delete", exc)
        return False
    st.success("Deleted")
    return True

"""
Session state helpers for the Streamlit admin console.
"""

from __future__ import annotations

import logging

import streamlit as st

from src.ui.api_client import AdminApiClient, ApiError

logger = logging.getLogger(__name__)

_TOKEN_KEY = "_admin_token"
_ADMIN_KEY = "_admin"
_PAGE_KEY = "_page"


def init_session_state() -> None:
    st.session_state.setdefault(_TOKEN_KEY, None)
    st.session_state.setdefault(_ADMIN_KEY, None)
    st.session_state.setdefault(_PAGE_KEY, "Dashboard")
    st.session_state.setdefault("_dropdown_open", False)


def get_client() -> AdminApiClient:
    return AdminApiClient(token=st.session_state.get(_TOKEN_KEY))


def is_logged_in() -> bool:
    return bool(st.session_state.get(_TOKEN_KEY))


def current_admin() -> dict | None:
    return st.session_state.get(_ADMIN_KEY)


def login(email: str, password: str) -> None:
    client = AdminApiClient()
    data = client.login(email, password)
    st.session_state[_TOKEN_KEY] = data["token"]
    st.session_state[_ADMIN_KEY] = data["admin"]


def logout() -> None:
    client = get_client()
    try:
        client.logout()
    except ApiError as exc:
        logger.info("Logout request failed (%s); clearing local session", exc)
    st.session_state[_TOKEN_KEY] = None
    st.session_state[_ADMIN_KEY] = None
    st.session_state["_dropdown_open"] = False


def handle_auth_error(exc: ApiError) -> bool:
    """Drop the local session on 401. Returns True when handled."""
    if exc.status_code == 401:
        st.session_state[_TOKEN_KEY] = None
        st.session_state[_ADMIN_KEY] = None
        return True
    return False


def get_page() -> str:
    return st.session_state.get(_PAGE_KEY, "Dashboard")


def set_page(page: str) -> None:
    st.session_state[_PAGE_KEY] = page

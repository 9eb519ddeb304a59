"""
Streamlit admin console entrypoint.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st


def _ensure_repo_root_on_path() -> None:
    # streamlit run src/ui/app.py sets sys.path[0] == "src/ui", which breaks `import src.*`.
    repo_root = Path(__file__).resolve().parents[2]
    repo_root_s = str(repo_root)
    if repo_root_s not in sys.path:
        sys.path.insert(0, repo_root_s)


_ensure_repo_root_on_path()

from src.logging_config import configure_logging, get_logger  # noqa: E402
from src.ui.components import render_notification_bell  # noqa: E402
from src.ui.pages import PAGES, render_login_page  # noqa: E402
from src.ui.session import (  # noqa: E402
    current_admin,
    get_client,
    get_page,
    init_session_state,
    is_logged_in,
    logout,
    set_page,
)
from src.ui.styles import apply_styles  # noqa: E402

configure_logging(service_name="ai-tools-hub-admin")
logger = get_logger(__name__)


def main() -> None:
    st.set_page_config(
        page_title="AI Tools Hub Admin",
        page_icon="🛠️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    apply_styles()
    init_session_state()

    if not is_logged_in():
        render_login_page()
        return

    client = get_client()
    admin = current_admin() or {}

    st.sidebar.title("AI Tools Hub")
    st.sidebar.caption(f"{admin.get('displayName') or admin.get('email', '')} · {admin.get('role', '')}")
    render_notification_bell(client)

    names = list(PAGES)
    current = get_page()
    choice = st.sidebar.radio("Navigate", names, index=names.index(current) if current in names else 0)
    if choice != current:
        set_page(choice)

    if st.sidebar.button("Sign out"):
        logout()
        st.rerun()

    PAGES[choice](client)


if __name__ == "__main__":
    main()

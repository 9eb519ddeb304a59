"""
CSS for the admin console.
"""

from __future__ import annotations

import streamlit as st

PRIMARY = "#8B5CF6"
SECONDARY = "#3B82F6"


def apply_styles() -> None:
    st.markdown(
        f"""
        <style>
          :root {{
            --hub-primary: {PRIMARY};
            --hub-secondary: {SECONDARY};
          }}
          section[data-testid="stSidebar"] h1 {{
            background: linear-gradient(90deg, var(--hub-primary), var(--hub-secondary));
            -webkit-background-clip: text;
            -webkit-text-fill-color: transparent;
          }}
          div[data-testid="stMetricValue"] {{ color: var(--hub-primary); }}
        </style>
        """,
        unsafe_allow_html=True,
    )

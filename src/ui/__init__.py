"""
Streamlit admin console.

The console is a thin client: every read and write goes through the
`/v1/admin` API with the signed-in admin's bearer token.
"""

from __future__ import annotations

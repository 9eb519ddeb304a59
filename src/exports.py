"""
CSV and JSON exports built as in-memory strings.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from typing import Any

USER_COLUMNS = ("uid", "email", "displayName", "provider", "role", "isActive", "isPremium", "createdAt", "lastLoginAt")
SECURITY_EVENT_COLUMNS = ("id", "timestamp", "type", "severity", "status", "ip", "location", "description")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ";".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    return str(value)


def to_csv(rows: Iterable[dict[str, Any]], columns: Sequence[str]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(c)) for c in columns])
    return buf.getvalue()


def users_to_csv(users: Iterable[dict[str, Any]]) -> str:
    rows = ({**u, "uid": u.get("uid") or u.get("id")} for u in users)
    return to_csv(rows, USER_COLUMNS)


def security_events_to_csv(events: Iterable[dict[str, Any]]) -> str:
    return to_csv(events, SECURITY_EVENT_COLUMNS)


def analytics_to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)

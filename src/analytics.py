"""
Dashboard statistics computed from the stored documents.

Everything here is a straight aggregation over full collection reads.
Traffic analytics has no data source yet, so ``traffic_overview`` returns a
zeroed payload flagged with ``"stub": True``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from src.config import BLOG_STATUSES, MESSAGE_STATUSES
from src.store import DocumentStore
from src.store import collections as col

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def user_stats(users: list[dict[str, Any]], now: datetime | None = None) -> dict[str, int]:
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = now - timedelta(days=7)
    month_start = today.replace(day=1)

    created = [parse_timestamp(u.get("createdAt")) for u in users]
    return {
        "totalUsers": len(users),
        "activeUsers": sum(1 for u in users if u.get("isActive") is not False),
        "newUsersToday": sum(1 for c in created if c and c >= today),
        "newUsersThisWeek": sum(1 for c in created if c and c >= week_ago),
        "newUsersThisMonth": sum(1 for c in created if c and c >= month_start),
        "premiumUsers": sum(1 for u in users if u.get("isPremium") is True),
    }


def content_stats(posts: list[dict[str, Any]]) -> dict[str, int]:
    by_status = {s: 0 for s in sorted(BLOG_STATUSES)}
    for p in posts:
        status = p.get("status")
        if status in by_status:
            by_status[status] += 1
    return {
        "totalPosts": len(posts),
        "publishedPosts": by_status["published"],
        "draftPosts": by_status["draft"],
        "archivedPosts": by_status["archived"],
        "totalViews": sum(int(p.get("views") or 0) for p in posts),
        "totalLikes": sum(int(p.get("likes") or 0) for p in posts),
    }


def tool_stats(tools: list[dict[str, Any]], usage: list[dict[str, Any]], top: int = 10) -> dict[str, Any]:
    totals: dict[str, int] = {}
    for record in usage:
        name = record.get("toolName")
        if name:
            totals[name] = totals.get(name, 0) + int(record.get("usageCount") or 0)
    popular = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))[:top]
    return {
        "totalTools": len(tools),
        "activeTools": sum(1 for t in tools if t.get("isActive")),
        "totalUsage": sum(totals.values()),
        "popularTools": [{"name": name, "usage": count} for name, count in popular],
    }


def message_stats(messages: list[dict[str, Any]]) -> dict[str, int]:
    counts = {s: 0 for s in sorted(MESSAGE_STATUSES)}
    for m in messages:
        status = m.get("status")
        if status in counts:
            counts[status] += 1
    return {"totalMessages": len(messages), **counts}


def traffic_overview(time_range: str = "7d") -> dict[str, Any]:
    days = TIME_RANGES.get(time_range, 7)
    return {
        "stub": True,
        "timeRange": time_range if time_range in TIME_RANGES else "7d",
        "days": days,
        "totalViews": 0,
        "uniqueVisitors": 0,
        "totalConversions": 0,
        "conversionRate": "0.00%",
    }


def overview(store: DocumentStore, *, time_range: str = "7d", now: datetime | None = None) -> dict[str, Any]:
    """Full dashboard payload."""
    now = now or datetime.now(timezone.utc)
    return {
        "generatedAt": now.isoformat(),
        "users": user_stats(store.query(col.USERS), now=now),
        "content": content_stats(store.query(col.BLOG_POSTS)),
        "tools": tool_stats(store.query(col.AI_TOOLS), store.query(col.TOOL_USAGE)),
        "messages": message_stats(store.query(col.CONTACT_MESSAGES)),
        "traffic": traffic_overview(time_range),
    }

"""
Admin notification center: bell badge, dropdown and click handling.

A ``NotificationCenter`` holds the live list of unread notifications for
one admin. The list is replaced wholesale each time the underlying live
query fires; nothing is merged or diffed. Clicking a notification marks it
read, navigates for contact form notifications and always closes the
dropdown, even when marking read fails.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any

from src.config import settings
from src.exceptions import HubError
from src.repository.notifications import NotificationRepo
from src.store import Subscription

logger = logging.getLogger(__name__)

MESSAGES_VIEW = "/admin/messages"

# Notification types that open a specific admin view when clicked
NAVIGATION_TARGETS = {
    "contact_form": MESSAGES_VIEW,
}


def badge_label(count: int, cap: int | None = None) -> str | None:
    """
    Text for the bell badge: None for zero, the count up to ``cap``, then "<cap>+".
    """
    cap = settings.notification_badge_cap if cap is None else cap
    if count <= 0:
        return None
    if count > cap:
        return f"{cap}+"
    return str(count)


@dataclass(frozen=True)
class DropdownView:
    items: list[dict[str, Any]]
    more_count: int = 0

    @property
    def more_label(self) -> str | None:
        return f"+{self.more_count} more" if self.more_count > 0 else None

    def to_dict(self) -> dict[str, Any]:
        return {"items": self.items, "more_count": self.more_count, "more_label": self.more_label}


def dropdown_view(notifications: list[dict[str, Any]], limit: int | None = None) -> DropdownView:
    limit = settings.notification_dropdown_limit if limit is None else limit
    shown = list(notifications[:limit])
    return DropdownView(items=shown, more_count=max(0, len(notifications) - len(shown)))


@dataclass(frozen=True)
class ClickResult:
    notification_id: str
    marked_read: bool
    navigate_to: str | None = None
    dropdown_open: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "marked_read": self.marked_read,
            "navigate_to": self.navigate_to,
            "dropdown_open": self.dropdown_open,
            "error": self.error,
        }


class NotificationCenter:
    """Live unread list for one admin, plus the dropdown state."""

    def __init__(self, repo: NotificationRepo) -> None:
        self.repo = repo
        self.admin_id: str | None = None
        self.dropdown_open = False
        self._notifications: list[dict[str, Any]] = []
        self._subscription: Subscription | None = None
        self._watchers: list[queue.Queue] = []
        self._lock = threading.Lock()

    @property
    def attached(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def notifications(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._notifications)

    @property
    def badge(self) -> str | None:
        return badge_label(len(self.notifications))

    def dropdown(self) -> DropdownView:
        return dropdown_view(self.notifications)

    def attach(self, session) -> None:
        """Start the live query for an authenticated admin session."""
        if session is None:
            raise ValueError("an admin session is required")
        if self.attached:
            return
        self.admin_id = session.admin_id
        self._subscription = self.repo.subscribe_unread(self._on_snapshot)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        with self._lock:
            self._notifications = []
            watchers = list(self._watchers)
            self._watchers.clear()
        self.dropdown_open = False
        for w in watchers:
            w.put(None)

    def toggle_dropdown(self) -> bool:
        self.dropdown_open = not self.dropdown_open
        return self.dropdown_open

    def click(self, notification_id: str) -> ClickResult:
        """
        Mark the notification read, pick the navigation target and close
        the dropdown. A failed mark-read is logged and does not stop the
        other two steps.
        """
        target = next((n for n in self.notifications if n.get("id") == notification_id), None)
        marked, error = True, None
        try:
            if target is None:
                # Not in the current snapshot (already read elsewhere)
                target = self.repo.get(notification_id)
            self.repo.mark_read(notification_id)
        except HubError as exc:
            marked, error = False, exc.message
            logger.error(
                "Error marking notification as read: %s",
                exc,
                extra={"notification_id": notification_id, "error_code": exc.error_code},
            )

        self.dropdown_open = False
        return ClickResult(
            notification_id=notification_id,
            marked_read=marked,
            navigate_to=NAVIGATION_TARGETS.get((target or {}).get("type", "")),
            dropdown_open=False,
            error=error,
        )

    def watch(self) -> queue.Queue:
        """
        Queue receiving every new snapshot (a list) and ``None`` once the
        center is detached. The current snapshot is queued immediately.
        """
        q: queue.Queue = queue.Queue()
        with self._lock:
            self._watchers.append(q)
            q.put(list(self._notifications))
        return q

    def unwatch(self, q: queue.Queue) -> None:
        with self._lock:
            if q in self._watchers:
                self._watchers.remove(q)

    def _on_snapshot(self, docs: list[dict[str, Any]]) -> None:
        with self._lock:
            self._notifications = list(docs)
            watchers = list(self._watchers)
        for w in watchers:
            w.put(list(docs))


@dataclass
class NotificationHub:
    """
    One NotificationCenter per signed-in admin session.

    Centers are keyed by session token, so ending one session (logout in
    one tab, expiry) leaves the admin's other sessions subscribed.
    """

    repo: NotificationRepo
    _centers: dict[str, NotificationCenter] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def open(self, session) -> NotificationCenter:
        with self._lock:
            center = self._centers.get(session.token)
            if center is None:
                center = NotificationCenter(self.repo)
                self._centers[session.token] = center
        center.attach(session)
        return center

    def get(self, token: str) -> NotificationCenter | None:
        with self._lock:
            return self._centers.get(token)

    def close(self, token: str) -> bool:
        with self._lock:
            center = self._centers.pop(token, None)
        if center is None:
            return False
        center.detach()
        logger.debug("Closed notification center for admin %s", center.admin_id)
        return True

    def close_session(self, session) -> None:
        self.close(session.token)

    def close_all(self) -> None:
        with self._lock:
            tokens = list(self._centers)
        for token in tokens:
            self.close(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._centers)

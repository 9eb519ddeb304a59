"""
Admin notifications (the bell in the admin header).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from src.repository.base import CollectionRepo
from src.store import SERVER_TIMESTAMP, Subscription
from src.store import collections as col

UNREAD = [("isRead", "==", False)]


class NotificationRepo(CollectionRepo):
    collection = col.ADMIN_NOTIFICATIONS

    def create_notification(
        self,
        type: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> str:
        return self.store.add(
            self.collection,
            {
                "type": type,
                "title": title,
                "message": message,
                "data": data or {},
                "isRead": False,
                "createdAt": SERVER_TIMESTAMP,
            },
        )

    def list_unread(self) -> list[dict[str, Any]]:
        # Insertion order, same as the live query.
        return self.store.query(self.collection, where=UNREAD)

    def mark_read(self, notification_id: str) -> None:
        """Single-field update; raises DocumentNotFoundError for unknown ids."""
        self.store.update(self.collection, notification_id, {"isRead": True})

    def mark_all_read(self) -> int:
        unread = self.list_unread()
        if not unread:
            return 0
        batch = self.store.batch()
        for n in unread:
            batch.update(self.collection, n["id"], {"isRead": True, "readAt": SERVER_TIMESTAMP})
        batch.commit()
        return len(unread)

    def subscribe_unread(self, callback: Callable[[list[dict[str, Any]]], None]) -> Subscription:
        return self.store.listen(self.collection, callback, where=UNREAD)

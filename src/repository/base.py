"""
Generic collection repository: one collection, timestamped CRUD.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from src.exceptions import DocumentNotFoundError
from src.store import SERVER_TIMESTAMP, DocumentStore
from src.store.documents import Filter


class CollectionRepo:
    """
    CRUD over a single collection.

    ``create`` stamps createdAt/updatedAt, ``update`` stamps updatedAt.
    Subclasses set ``collection`` and add their domain operations.
    """

    collection: str = ""

    def __init__(self, store: DocumentStore) -> None:
        if not self.collection:
            raise TypeError(f"{type(self).__name__}.collection is not set")
        self.store = store

    def create(self, data: dict[str, Any]) -> str:
        payload = {**data, "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP}
        return self.store.add(self.collection, payload)

    def get(self, doc_id: str) -> dict[str, Any] | None:
        return self.store.get(self.collection, doc_id)

    def require(self, doc_id: str) -> dict[str, Any]:
        doc = self.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(self.collection, doc_id)
        return doc

    def list(
        self,
        *,
        where: Iterable[Filter] = (),
        order_by: str | None = "createdAt",
        descending: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        return self.store.query(
            self.collection,
            where=where,
            order_by=order_by,
            descending=descending,
            limit=limit,
        )

    def update(self, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply ``fields`` and return the updated document."""
        self.store.update(self.collection, doc_id, {**fields, "updatedAt": SERVER_TIMESTAMP})
        return self.require(doc_id)

    def delete(self, doc_id: str) -> bool:
        return self.store.delete(self.collection, doc_id)

    def count(self) -> int:
        return self.store.count(self.collection)

"""
Persistence layer: JSON document store and object storage.
"""

from __future__ import annotations

from src.store.documents import (
    SERVER_TIMESTAMP,
    DocumentStore,
    Increment,
    Subscription,
    WriteBatch,
    get_field,
    utc_now_iso,
)
from src.store.storage import ObjectStorage, blog_image_path, sanitize_filename

__all__ = [
    "SERVER_TIMESTAMP",
    "DocumentStore",
    "Increment",
    "ObjectStorage",
    "Subscription",
    "WriteBatch",
    "blog_image_path",
    "get_field",
    "sanitize_filename",
    "utc_now_iso",
]

"""
SQLite-backed document store.

Collections of JSON documents addressed by (collection, id), with simple
where/order/limit queries, atomic write batches and live-query listeners
that receive the full result list after every committed write.
"""

from __future__ import annotations

import copy
import json
import logging
import sqlite3
import threading
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.exceptions import DatabaseError, DocumentNotFoundError
from src.logging_config import PerformanceTracker

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Filter = tuple[str, str, Any]
Listener = Callable[[list[Document]], None]

_OPERATORS = {"==", "!=", "in", "not_in", "array_contains", "<", "<=", ">", ">="}


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    """Field transform adding ``amount`` to the stored numeric value."""

    amount: int | float = 1


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


# =============================================================================
# Field path helpers
# =============================================================================


def get_field(doc: Document, path: str) -> Any:
    """Resolve a dotted field path, returning None when any segment is missing."""
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _set_field(doc: Document, path: str, value: Any) -> None:
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    leaf = parts[-1]
    if isinstance(value, Increment):
        existing = current.get(leaf)
        base = existing if isinstance(existing, (int, float)) and not isinstance(existing, bool) else 0
        current[leaf] = base + value.amount
    else:
        current[leaf] = value


def _resolve_transforms(value: Any, now: str) -> Any:
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, Increment):
        return value.amount
    if isinstance(value, dict):
        return {k: _resolve_transforms(v, now) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_transforms(v, now) for v in value]
    return value


def deep_merge(base: Document, incoming: Document) -> Document:
    out = dict(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def _apply_update(doc: Document, fields: dict[str, Any], now: str) -> Document:
    out = copy.deepcopy(doc)
    for path, value in fields.items():
        if isinstance(value, Increment):
            _set_field(out, path, value)
        else:
            _set_field(out, path, _resolve_transforms(value, now))
    return out


def _matches(doc: Document, filters: Sequence[Filter]) -> bool:
    for path, op, expected in filters:
        actual = get_field(doc, path)
        if op == "==":
            ok = actual == expected
        elif op == "!=":
            ok = actual != expected
        elif op == "in":
            ok = actual in expected
        elif op == "not_in":
            ok = actual not in expected
        elif op == "array_contains":
            ok = isinstance(actual, list) and expected in actual
        else:
            if actual is None:
                return False
            try:
                if op == "<":
                    ok = actual < expected
                elif op == "<=":
                    ok = actual <= expected
                elif op == ">":
                    ok = actual > expected
                else:
                    ok = actual >= expected
            except TypeError:
                return False
        if not ok:
            return False
    return True


def _validate_filters(filters: Sequence[Filter]) -> None:
    for flt in filters:
        if len(flt) != 3 or flt[1] not in _OPERATORS:
            raise ValueError(f"Invalid filter: {flt!r}")


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing values sort last regardless of direction handled by caller.
    if value is None:
        return (1, "")
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (0, str(value))


# =============================================================================
# Listeners
# =============================================================================


@dataclass
class _ListenerEntry:
    collection: str
    filters: tuple[Filter, ...]
    callback: Listener
    order_by: str | None = None
    descending: bool = False


class Subscription:
    """Handle returned by ``DocumentStore.listen``; ``unsubscribe`` is idempotent."""

    def __init__(self, store: DocumentStore, listener_id: int) -> None:
        self._store = store
        self._listener_id = listener_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._remove_listener(self._listener_id)


# =============================================================================
# Write batches
# =============================================================================


@dataclass
class _BatchOp:
    kind: str  # set | update | delete
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)
    merge: bool = False


class WriteBatch:
    """
    Collects set/update/delete operations and commits them in one
    SQLite transaction. Either every operation is applied or none is.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._ops: list[_BatchOp] = []
        self._committed = False

    def __len__(self) -> int:
        return len(self._ops)

    def set(self, collection: str, doc_id: str, data: dict[str, Any], *, merge: bool = False) -> WriteBatch:
        self._ops.append(_BatchOp("set", collection, doc_id, dict(data), merge))
        return self

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> WriteBatch:
        self._ops.append(_BatchOp("update", collection, doc_id, dict(fields)))
        return self

    def delete(self, collection: str, doc_id: str) -> WriteBatch:
        self._ops.append(_BatchOp("delete", collection, doc_id))
        return self

    def commit(self) -> None:
        if self._committed:
            raise RuntimeError("WriteBatch already committed")
        self._committed = True
        self._store._commit_batch(self._ops)


# =============================================================================
# Store
# =============================================================================


class DocumentStore:
    """
    Lightweight SQLite document store.

    Design goals:
    - Single-file DB (easy deploy + backup)
    - Documents stored as JSON blobs keyed by (collection, id)
    - Insertion order preserved for unordered queries
    - In-process live queries for admin notification feeds
    """

    def __init__(self, db_path: str | Path = "data/hub.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.RLock()
        self._listeners: dict[int, _ListenerEntry] = {}
        self._listeners_lock = threading.Lock()
        # Serializes snapshot query + delivery so listeners never see an older
        # snapshot after a newer one.
        self._notify_lock = threading.RLock()
        self._next_listener_id = 1
        self._init_db()

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=10)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute("PRAGMA synchronous = NORMAL;")
        return conn

    def _init_db(self) -> None:
        try:
            with self._conn() as conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS documents (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        collection TEXT NOT NULL,
                        doc_id TEXT NOT NULL,
                        data_json TEXT NOT NULL,
                        UNIQUE (collection, doc_id)
                    );

                    CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection, seq);
                    """
                )
        except sqlite3.Error as exc:
            raise DatabaseError("Failed to initialize document store", operation="init") from exc

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Document | None:
        if not doc_id:
            return None
        try:
            with self._conn() as conn:
                row = conn.execute(
                    "SELECT data_json FROM documents WHERE collection = ? AND doc_id = ?",
                    (collection, doc_id),
                ).fetchone()
        except sqlite3.Error as exc:
            raise DatabaseError(operation="get", collection=collection) from exc
        if not row:
            return None
        return self._to_document(doc_id, row["data_json"])

    def query(
        self,
        collection: str,
        *,
        where: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        filters = tuple(where)
        _validate_filters(filters)
        try:
            with PerformanceTracker("store_query", collection=collection), self._conn() as conn:
                rows = conn.execute(
                    "SELECT doc_id, data_json FROM documents WHERE collection = ? ORDER BY seq ASC",
                    (collection,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError(operation="query", collection=collection) from exc

        docs = [self._to_document(row["doc_id"], row["data_json"]) for row in rows]
        docs = [d for d in docs if _matches(d, filters)]
        if order_by:
            present = [d for d in docs if get_field(d, order_by) is not None]
            missing = [d for d in docs if get_field(d, order_by) is None]
            present.sort(key=lambda d: _sort_key(get_field(d, order_by)), reverse=descending)
            docs = present + missing
        if limit is not None:
            docs = docs[: max(0, int(limit))]
        return docs

    def count(self, collection: str) -> int:
        try:
            with self._conn() as conn:
                row = conn.execute("SELECT COUNT(*) AS c FROM documents WHERE collection = ?", (collection,)).fetchone()
        except sqlite3.Error as exc:
            raise DatabaseError(operation="count", collection=collection) from exc
        return int(row["c"] if row else 0)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a new document with a generated id and return the id."""
        doc_id = new_document_id()
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict[str, Any], *, merge: bool = False) -> None:
        if not doc_id:
            raise ValueError("doc_id is required")
        self._commit_batch([_BatchOp("set", collection, doc_id, dict(data), merge)])

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """
        Apply field updates (dotted paths allowed) to an existing document.

        Raises DocumentNotFoundError when the document does not exist.
        """
        self._commit_batch([_BatchOp("update", collection, doc_id, dict(fields))])

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._write_lock:
            try:
                with self._conn() as conn:
                    cur = conn.execute(
                        "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
                        (collection, doc_id),
                    )
                    deleted = cur.rowcount > 0
            except sqlite3.Error as exc:
                raise DatabaseError(operation="delete", collection=collection) from exc
        if deleted:
            self._notify({collection})
        return deleted

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def _commit_batch(self, ops: Sequence[_BatchOp]) -> None:
        if not ops:
            return
        now = utc_now_iso()
        touched: set[str] = set()
        with self._write_lock:
            conn = self._conn()
            conn.isolation_level = None
            try:
                conn.execute("BEGIN IMMEDIATE")
                for op in ops:
                    self._apply_op(conn, op, now)
                    touched.add(op.collection)
                conn.execute("COMMIT")
            except DocumentNotFoundError:
                conn.execute("ROLLBACK")
                raise
            except sqlite3.Error as exc:
                try:
                    conn.execute("ROLLBACK")
                except sqlite3.Error:
                    logger.warning("Rollback failed after store error", exc_info=True)
                raise DatabaseError(operation="commit", collection=",".join(sorted({o.collection for o in ops}))) from exc
            finally:
                conn.close()
        self._notify(touched)

    def _apply_op(self, conn: sqlite3.Connection, op: _BatchOp, now: str) -> None:
        if op.kind == "delete":
            conn.execute("DELETE FROM documents WHERE collection = ? AND doc_id = ?", (op.collection, op.doc_id))
            return

        row = conn.execute(
            "SELECT data_json FROM documents WHERE collection = ? AND doc_id = ?",
            (op.collection, op.doc_id),
        ).fetchone()
        existing = json.loads(row["data_json"]) if row else None

        if op.kind == "update":
            if existing is None:
                raise DocumentNotFoundError(op.collection, op.doc_id)
            new_data = _apply_update(existing, op.data, now)
        else:
            incoming = _resolve_transforms(op.data, now)
            incoming.pop("id", None)
            new_data = deep_merge(existing, incoming) if (op.merge and existing) else incoming

        conn.execute(
            """
            INSERT INTO documents (collection, doc_id, data_json) VALUES (?, ?, ?)
            ON CONFLICT(collection, doc_id) DO UPDATE SET data_json = excluded.data_json
            """,
            (op.collection, op.doc_id, json.dumps(new_data, ensure_ascii=False)),
        )

    # -------------------------------------------------------------------------
    # Live queries
    # -------------------------------------------------------------------------

    def listen(
        self,
        collection: str,
        callback: Listener,
        *,
        where: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> Subscription:
        """
        Subscribe to a query. ``callback`` receives the full result list now
        and again after every committed write to ``collection``.
        """
        filters = tuple(where)
        _validate_filters(filters)
        entry = _ListenerEntry(collection, filters, callback, order_by, descending)
        with self._listeners_lock:
            listener_id = self._next_listener_id
            self._next_listener_id += 1
            self._listeners[listener_id] = entry
        self._deliver(listener_id, entry)
        return Subscription(self, listener_id)

    def listener_count(self) -> int:
        with self._listeners_lock:
            return len(self._listeners)

    def _remove_listener(self, listener_id: int) -> None:
        with self._listeners_lock:
            self._listeners.pop(listener_id, None)

    def _notify(self, collections: set[str]) -> None:
        with self._listeners_lock:
            targets = [(lid, e) for lid, e in self._listeners.items() if e.collection in collections]
        for listener_id, entry in targets:
            self._deliver(listener_id, entry)

    def _deliver(self, listener_id: int, entry: _ListenerEntry) -> None:
        try:
            with self._notify_lock:
                docs = self.query(
                    entry.collection,
                    where=entry.filters,
                    order_by=entry.order_by,
                    descending=entry.descending,
                )
                entry.callback(docs)
        except Exception:
            logger.exception("Listener %s on %s failed", listener_id, entry.collection)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_document(doc_id: str, data_json: str) -> Document:
        data = json.loads(data_json) if data_json else {}
        return {"id": doc_id, **data}

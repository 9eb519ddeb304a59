"""
Search, filter, sort and pagination helpers shared by every admin list.

The search predicate is a case-insensitive substring match across a few
fields; enum filters are exact equality. A filter value of None, "" or
"all" means "no filter".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from src.store.documents import get_field

_ANY = ("", "all")


def _field_text(doc: Mapping[str, Any], field: str) -> str:
    value = get_field(dict(doc), field) if "." in field else doc.get(field)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def matches_search(doc: Mapping[str, Any], term: str | None, fields: Sequence[str]) -> bool:
    term = (term or "").lower()
    if not term:
        return True
    return any(term in _field_text(doc, f).lower() for f in fields)


def _is_unset(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in _ANY)


def filter_documents(
    docs: Iterable[Mapping[str, Any]],
    term: str | None = None,
    fields: Sequence[str] = (),
    equals: Mapping[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Apply the search predicate AND every equality filter."""
    active = {k: v for k, v in (equals or {}).items() if not _is_unset(v)}
    out: list[dict[str, Any]] = []
    for doc in docs:
        if not matches_search(doc, term, fields):
            continue
        if any(doc.get(k) != v for k, v in active.items()):
            continue
        out.append(dict(doc))
    return out


def sort_documents(
    docs: Iterable[Mapping[str, Any]],
    key: str,
    *,
    descending: bool = False,
) -> list[dict[str, Any]]:
    """Sort by ``key``; documents missing the key always go last."""
    items = [dict(d) for d in docs]
    present = [d for d in items if d.get(key) is not None]
    missing = [d for d in items if d.get(key) is None]
    present.sort(key=lambda d: (str(type(d[key]).__name__), d[key]), reverse=descending)
    return present + missing


def paginate(
    docs: Sequence[dict[str, Any]],
    *,
    limit: int,
    offset: int = 0,
    max_limit: int = 200,
) -> tuple[int, list[dict[str, Any]]]:
    """Return (total, page) with limit clamped to [1, max_limit] and offset >= 0."""
    limit = max(1, min(int(limit), max_limit))
    offset = max(0, int(offset))
    return len(docs), list(docs[offset : offset + limit])

"""
Input validation for admin and public forms.

Required-field checks mirror the form rules of the site: values are
trimmed and a blank value counts as missing. Everything here raises
``src.exceptions.ValidationError`` (or its subclasses) before the
document store is touched.
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Iterable, Mapping
from typing import Any

from src.config import settings
from src.exceptions import MissingRequiredFieldError, ValidationError

# Document ids: generated hex ids plus human-chosen ids such as "main"
_DOC_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

# Pragmatic email shape check; full RFC validation happens in the pydantic models
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Control characters other than tab/newline/carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def validate_document_id(doc_id: str, *, field: str = "id") -> str:
    """Validate a document id taken from a URL path."""
    if not isinstance(doc_id, str) or not _DOC_ID_PATTERN.match(doc_id):
        raise ValidationError("Invalid document id", field=field, detail=repr(doc_id))
    return doc_id


def validate_email(email: str, *, field: str = "email") -> str:
    value = (email or "").strip()
    if not value:
        raise MissingRequiredFieldError(field)
    if len(value) > 254 or not _EMAIL_PATTERN.match(value):
        raise ValidationError("Invalid email address", field=field)
    return value.lower()


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise MissingRequiredFieldError for the first blank or missing field."""
    for name in fields:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingRequiredFieldError(name)


def validate_choice(value: str, allowed: Iterable[str], *, field: str) -> str:
    allowed_set = set(allowed)
    if value not in allowed_set:
        raise ValidationError(
            f"Must be one of: {', '.join(sorted(allowed_set))}",
            field=field,
            detail=repr(value),
        )
    return value


def clean_text(value: str | None, *, max_length: int = 10_000) -> str:
    """Strip control characters and surrounding whitespace, then truncate."""
    if value is None:
        return ""
    text = _CONTROL_CHARS.sub("", str(value)).strip()
    return text[:max_length]


def decode_image_upload(data_base64: str, content_type: str) -> bytes:
    """
    Decode a base64 image payload and enforce type and size limits.

    Raises:
        ValidationError: wrong content type, malformed base64 or too large.
    """
    if content_type not in settings.allowed_image_types:
        raise ValidationError("Please select an image file", field="content_type", detail=repr(content_type))

    payload = (data_base64 or "").strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid base64 image data", field="data_base64") from exc

    if not raw:
        raise MissingRequiredFieldError("data_base64")
    if len(raw) > settings.max_image_bytes:
        limit_mb = settings.max_image_bytes // (1024 * 1024)
        raise ValidationError(f"Image size should be less than {limit_mb}MB", field="data_base64")
    return raw

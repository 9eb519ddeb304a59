"""
Security module for AI Tools Hub.

Provides input validation and admin password hashing.
"""

from src.security.passwords import hash_password, verify_password
from src.security.validators import (
    clean_text,
    decode_image_upload,
    require_fields,
    validate_choice,
    validate_document_id,
    validate_email,
)

__all__ = [
    "hash_password",
    "verify_password",
    "clean_text",
    "decode_image_upload",
    "require_fields",
    "validate_choice",
    "validate_document_id",
    "validate_email",
]

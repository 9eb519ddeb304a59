"""
Tests for input validators (src.security.validators).
"""

import base64

import pytest

from src.exceptions import MissingRequiredFieldError, ValidationError
from src.security.validators import (
    clean_text,
    decode_image_upload,
    require_fields,
    validate_choice,
    validate_document_id,
    validate_email,
)


class TestValidateDocumentId:
    def test_valid_ids(self):
        for doc_id in ("main", "merge-pdf", "a1B2_c3", "x" * 128):
            assert validate_document_id(doc_id) == doc_id

    def test_invalid_ids(self):
        for doc_id in ("", "a/b", "../x", "bad$id", "x" * 129, None):
            with pytest.raises(ValidationError):
                validate_document_id(doc_id)


class TestValidateEmail:
    def test_normalizes_case_and_whitespace(self):
        assert validate_email("  Jo@X.com ") == "jo@x.com"

    def test_blank_is_missing(self):
        with pytest.raises(MissingRequiredFieldError):
            validate_email("   ")

    def test_malformed(self):
        for value in ("jo", "jo@x", "jo @x.com", "a@b@c.com"):
            with pytest.raises(ValidationError):
                validate_email(value)


class TestRequireFields:
    def test_whitespace_counts_as_missing(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            require_fields({"name": "Jo", "subject": "  "}, ("name", "subject"))
        assert exc_info.value.field == "subject"

    def test_all_present(self):
        require_fields({"name": "Jo", "count": 0}, ("name", "count"))


def test_validate_choice():
    assert validate_choice("draft", {"draft", "published"}, field="status") == "draft"
    with pytest.raises(ValidationError) as exc_info:
        validate_choice("live", {"draft", "published"}, field="status")
    assert "draft, published" in exc_info.value.message


def test_clean_text_strips_control_chars_and_truncates():
    assert clean_text("  hi\x00there\n ") == "hithere"
    assert clean_text("abcdef", max_length=3) == "abc"
    assert clean_text(None) == ""


class TestDecodeImageUpload:
    def test_plain_and_data_url(self):
        raw = b"\x89PNG data"
        encoded = base64.b64encode(raw).decode()
        assert decode_image_upload(encoded, "image/png") == raw
        assert decode_image_upload(f"data:image/png;base64,{encoded}", "image/png") == raw

    def test_rejects_non_image_type(self):
        with pytest.raises(ValidationError) as exc_info:
            decode_image_upload("AAAA", "application/pdf")
        assert "image" in exc_info.value.message.lower()

    def test_rejects_bad_base64(self):
        with pytest.raises(ValidationError):
            decode_image_upload("!!!not base64!!!", "image/png")

    def test_rejects_oversized(self, monkeypatch):
        from src.security import validators

        monkeypatch.setattr(validators.settings, "max_image_bytes", 4)
        with pytest.raises(ValidationError):
            decode_image_upload(base64.b64encode(b"12345").decode(), "image/png")

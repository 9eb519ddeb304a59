"""
Tests for the admin console HTTP client (src.ui.api_client).

The requests session is mocked; no network access.
"""

from __future__ import annotations

from unittest import mock

import pytest
import requests

from src.ui.api_client import AdminApiClient, ApiError


def _response(status: int, payload=None, *, text: str = "", content: bytes = b""):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status
    resp.text = text
    resp.content = content
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def api(http):
    return AdminApiClient("http://api.test/", session=http)


def test_login_stores_token_and_sends_bearer(api, http):
    http.request.return_value = _response(200, {"token": "tok", "admin": {"email": "a@x.com"}})
    api.login("a@x.com", "pw")
    assert api.token == "tok"

    http.request.return_value = _response(200, {"role": "admin"})
    api.me()
    _, kwargs = http.request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert http.request.call_args.args[1] == "http://api.test/v1/admin/auth/me"


def test_list_drops_unset_filters(api, http):
    http.request.return_value = _response(200, {"total": 0, "items": []})
    api.list("users", q="", status="all", role=None, limit=20)
    _, kwargs = http.request.call_args
    assert kwargs["params"] == {"limit": 20}


def test_error_envelope_becomes_api_error(api, http):
    http.request.return_value = _response(409, {"error": "confirmation_required", "message": "Confirmation required"})
    with pytest.raises(ApiError) as exc_info:
        api.delete("users/u1", confirm=False)
    err = exc_info.value
    assert err.status_code == 409
    assert err.error_code == "confirmation_required"
    assert err.message == "Confirmation required"
    _, kwargs = http.request.call_args
    assert kwargs["params"] == {"confirm": "false"}


def test_non_json_error_body(api, http):
    http.request.return_value = _response(502, text="Bad gateway")
    with pytest.raises(ApiError) as exc_info:
        api.get("settings")
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Bad gateway"


def test_connection_error_is_wrapped(api, http):
    http.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ApiError) as exc_info:
        api.notifications()
    assert exc_info.value.status_code == 0
    assert exc_info.value.error_code == "connection_error"


def test_logout_clears_token_even_on_failure(api, http):
    api.token = "tok"
    http.request.return_value = _response(401, {"error": "authentication_error"})
    with pytest.raises(ApiError):
        api.logout()
    assert api.token is None


def test_post_passes_query_params_and_body(api, http):
    http.request.return_value = _response(200, {"ok": True})
    api.post("settings/reset", confirm="true")
    method, url = http.request.call_args.args
    assert (method, url) == ("POST", "http://api.test/v1/admin/settings/reset")
    assert http.request.call_args.kwargs["params"] == {"confirm": "true"}
    assert http.request.call_args.kwargs["json"] is None


def test_download_returns_raw_bytes(api, http):
    http.request.return_value = _response(200, content=b"id,timestamp\r\n")
    assert api.download("security/events/export.csv") == b"id,timestamp\r\n"

"""
HTTP client used by the Streamlit admin console.

Every call goes through the API with the admin bearer token; the console
never touches the document store directly.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from src.config import get_settings

logger = logging.getLogger(__name__)


def _get_api_url() -> str:
    return get_settings().api_url.rstrip("/")


class ApiError(RuntimeError):
    """Non-2xx response from the API, carrying the JSON error envelope."""

    def __init__(self, status_code: int, payload: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.payload = payload or {}
        self.error_code = self.payload.get("error", "http_error")
        message = self.payload.get("message") or self.error_code
        super().__init__(f"{status_code}: {message}")

    @property
    def message(self) -> str:
        return str(self.payload.get("message") or self.error_code)


class AdminApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or _get_api_url()).rstrip("/")
        self.token = token
        self.timeout = timeout
        self._http = session or requests.Session()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, *, params: dict | None = None, json_body: Any = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, "", "all")}
        try:
            response = self._http.request(
                method,
                url,
                params=clean_params or None,
                json=json_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("API request failed: %s %s: %s", method, path, exc)
            raise ApiError(0, {"error": "connection_error", "message": str(exc)}) from exc

        if response.status_code >= 400:
            try:
                payload = response.json()
            except (ValueError, json.JSONDecodeError):
                payload = {"error": "http_error", "message": response.text[:200]}
            raise ApiError(response.status_code, payload if isinstance(payload, dict) else {})
        return response

    def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        return self.request(method, path, **kwargs).json()

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self._json("POST", "/v1/admin/auth/login", json_body={"email": email, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        if not self.token:
            return
        try:
            self.request("POST", "/v1/admin/auth/logout")
        finally:
            self.token = None

    def me(self) -> dict[str, Any]:
        return self._json("GET", "/v1/admin/auth/me")

    # -------------------------------------------------------------------------
    # Lists and mutations
    # -------------------------------------------------------------------------

    def list(self, resource: str, **params: Any) -> dict[str, Any]:
        """GET /v1/admin/<resource> with filters; returns {"total", "items", ...}."""
        return self._json("GET", f"/v1/admin/{resource}", params=params)

    def get(self, path: str, **params: Any) -> dict[str, Any]:
        return self._json("GET", f"/v1/admin/{path}", params=params)

    def patch(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._json("PATCH", f"/v1/admin/{path}", json_body=body)

    def post(self, path: str, body: dict[str, Any] | None = None, **params: Any) -> dict[str, Any]:
        return self._json("POST", f"/v1/admin/{path}", params=params, json_body=body)

    def put(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._json("PUT", f"/v1/admin/{path}", json_body=body)

    def delete(self, path: str, *, confirm: bool) -> dict[str, Any]:
        return self._json("DELETE", f"/v1/admin/{path}", params={"confirm": "true" if confirm else "false"})

    def download(self, path: str, **params: Any) -> bytes:
        return self.request("GET", f"/v1/admin/{path}", params=params).content

    # -------------------------------------------------------------------------
    # Notification bell
    # -------------------------------------------------------------------------

    def notifications(self) -> dict[str, Any]:
        return self._json("GET", "/v1/admin/notifications")

    def click_notification(self, notification_id: str) -> dict[str, Any]:
        return self._json("POST", f"/v1/admin/notifications/{notification_id}/click")

    def mark_all_notifications_read(self) -> dict[str, Any]:
        return self._json("POST", "/v1/admin/notifications/read-all")

"""
Centralized exception hierarchy for AI Tools Hub.

Every store, storage, auth and validation failure raised by the service
layer is one of these types; the API maps them to HTTP status codes.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception
# =============================================================================


class HubError(RuntimeError):
    """
    Base exception for all AI Tools Hub errors.

    Attributes:
        message: Human-readable error message.
        detail: Additional error details (optional).
        error_code: Machine-readable error code.
        request_id: Unique identifier for the request (optional).
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        error_code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.error_code = error_code or self._default_error_code()
        self.request_id = request_id or str(uuid.uuid4())

    def _default_error_code(self) -> str:
        return f"hub_{self.__class__.__name__.lower()}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.detail:
            result["detail"] = self.detail
        if self.request_id:
            result["request_id"] = self.request_id
        return result

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def log(self, level: int = logging.ERROR) -> None:
        """Log the exception with structured data."""
        logger.log(
            level,
            self.message,
            extra={
                "error_code": self.error_code,
                "detail": self.detail,
                "request_id": self.request_id,
                "exception_type": self.__class__.__name__,
            },
        )


# =============================================================================
# Input Validation Errors
# =============================================================================


class ValidationError(HubError):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.field = field
        full_message = f"{field}: {message}" if field else message
        super().__init__(
            full_message,
            detail=detail,
            error_code="validation_error",
            request_id=request_id,
        )


class MissingRequiredFieldError(ValidationError):
    """Raised when a required form field is missing or blank."""

    def __init__(self, field_name: str, *, request_id: str | None = None) -> None:
        super().__init__(
            message="Missing required field",
            field=field_name,
            detail=f"Field '{field_name}' is required",
            request_id=request_id,
        )


class ConfirmationRequiredError(HubError):
    """
    Raised when a destructive action is attempted without confirmation.

    HTTP Status: 409 Conflict
    """

    def __init__(self, action: str, *, request_id: str | None = None) -> None:
        self.action = action
        super().__init__(
            f"Confirmation required to {action}",
            detail="Repeat the request with confirm=true",
            error_code="confirmation_required",
            request_id=request_id,
        )


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(HubError):
    """
    Raised when a requested resource is not found.

    HTTP Status: 404 Not Found
    """

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message, detail=detail, error_code="not_found", request_id=request_id)


class DocumentNotFoundError(NotFoundError):
    """Raised when a document does not exist in its collection."""

    def __init__(self, collection: str, doc_id: str, *, request_id: str | None = None) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(
            "Document not found",
            detail=f"{collection}/{doc_id}",
            request_id=request_id,
        )


# =============================================================================
# Auth Errors
# =============================================================================


class AuthenticationError(HubError):
    """
    Raised when an admin session is missing, unknown or expired,
    or when login credentials are rejected.

    HTTP Status: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        *,
        detail: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message, detail=detail, error_code="authentication_error", request_id=request_id)


class PermissionDeniedError(HubError):
    """
    Raised when an authenticated admin lacks a permission.

    HTTP Status: 403 Forbidden
    """

    def __init__(self, permission: str, *, request_id: str | None = None) -> None:
        self.permission = permission
        super().__init__(
            "Permission denied",
            detail=f"Missing permission: {permission}",
            error_code="permission_denied",
            request_id=request_id,
        )


# =============================================================================
# Data Store Errors
# =============================================================================


class DataStoreError(HubError):
    """
    Raised when a document store or object storage operation fails.

    HTTP Status: 503 Service Unavailable
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        path: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.operation = operation
        self.path = path
        detail_parts = []
        if operation:
            detail_parts.append(f"Operation: {operation}")
        if path:
            detail_parts.append(f"Path: {path}")
        detail = "; ".join(detail_parts) if detail_parts else None
        super().__init__(
            message,
            detail=detail,
            error_code="data_store_error",
            request_id=request_id,
        )


class DatabaseError(DataStoreError):
    """Raised when a document store operation fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        *,
        operation: str | None = None,
        collection: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.collection = collection
        super().__init__(message, operation=operation, path=collection, request_id=request_id)


class StorageError(DataStoreError):
    """Raised when an object storage operation fails."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        *,
        operation: str | None = None,
        path: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message, operation=operation, path=path, request_id=request_id)


# =============================================================================
# HTTP Exception Helpers
# =============================================================================


def exception_to_http_status(exc: HubError) -> int:
    """
    Map exception to appropriate HTTP status code.

    Subclasses are listed before their parents so the most specific
    mapping wins.
    """
    status_map = (
        (MissingRequiredFieldError, 400),
        (ValidationError, 400),
        (AuthenticationError, 401),
        (PermissionDeniedError, 403),
        (DocumentNotFoundError, 404),
        (NotFoundError, 404),
        (ConfirmationRequiredError, 409),
        (DatabaseError, 503),
        (StorageError, 503),
        (DataStoreError, 503),
    )
    for exc_class, status in status_map:
        if isinstance(exc, exc_class):
            return status
    return 500


def handle_exception(exc: Exception, request_id: str | None = None) -> dict[str, Any]:
    """
    Convert any exception to standardized error response.

    Args:
        exc: The exception to handle.
        request_id: Request ID for tracing.

    Returns:
        Dictionary with error details.
    """
    if isinstance(exc, HubError):
        exc.request_id = request_id or exc.request_id
        return exc.to_dict()

    if isinstance(exc, ValueError):
        return ValidationError(str(exc), request_id=request_id).to_dict()
    if isinstance(exc, KeyError):
        return MissingRequiredFieldError(str(exc), request_id=request_id).to_dict()
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(request_id=request_id).to_dict()

    logger.error(
        "Unhandled exception",
        extra={
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "request_id": request_id,
        },
        exc_info=True,
    )
    return HubError(
        "An unexpected error occurred",
        error_code="internal_error",
        request_id=request_id,
    ).to_dict()

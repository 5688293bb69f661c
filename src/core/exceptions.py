"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authentication errors (401)
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"

    # Misconfiguration / no usable backend (503)
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Caller input is missing or inconsistent."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details=details,
        )


class InvalidCredentialsError(AppException):
    """Password verification failed."""

    def __init__(
        self, message: str = "Invalid credentials", details: Any | None = None
    ) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CREDENTIALS,
            message=message,
            status_code=401,
            details=details,
        )


class NotFoundError(AppException):
    """A requested resource does not exist in the selected backend."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.NOT_FOUND,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=404,
            details=details,
        )


class UserNotFoundError(NotFoundError):
    """User profile or identity account not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            message="User not found",
            error_code=ErrorCode.USER_NOT_FOUND,
            details={"user_id": user_id},
        )


class ServiceUnavailableError(AppException):
    """No usable backend, or a backend is misconfigured.

    Never the caller's fault and always safe to retry later.
    """

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.SERVICE_UNAVAILABLE,
            message=message,
            status_code=503,
            details=details,
        )


class BackendError(AppException):
    """A backend was reachable but the call failed."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.backend = backend
        payload = dict(details or {})
        if backend:
            payload.setdefault("backend", backend)
        super().__init__(
            error_code=ErrorCode.BACKEND_ERROR,
            message=message,
            status_code=500,
            details=payload or None,
        )

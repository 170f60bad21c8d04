"""Structured exception hierarchy for request-handling failures.

This module defines the closed error taxonomy shared by the request pipeline
(which turns errors into responses) and the contract compiler (which documents
the error envelope every operation may return).

Key components:
- **ErrorCode enum**: The seven stable error identifiers
- **ERROR_STATUS_MAP**: One HTTP status per error code
- **Severity enum**: Error classification for log levels and alerting
- **HubKitError**: Base exception carrying code, message, details and cause
- **Specialized exceptions**: One subclass per error code

Business handlers raise these to produce a specific status/code/message/details
verbatim. Anything else that escapes a handler is converted to
``INTERNAL_ERROR`` at the pipeline boundary.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Protocol


class ErrorCode(Enum):
    """Standardized error codes for hub-kit.

    These codes are part of the public response envelope and of the compiled
    interface document; they must never change once published.
    """

    BAD_REQUEST = "BAD_REQUEST"
    """The request could not be read (malformed JSON or multipart data)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication is missing or the presented token is not acceptable."""

    FORBIDDEN = "FORBIDDEN"
    """The caller is authenticated but lacks a required role."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    CONFLICT = "CONFLICT"
    """The request conflicts with the current state of a resource."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed; details enumerate every violation."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


ERROR_STATUS_MAP: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


class Severity(Enum):
    """Severity levels used to pick log levels and alerting behaviour."""

    LOW = "LOW"
    """Errors caused by client input during normal operation."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single request but not the service."""

    HIGH = "HIGH"
    """Security-relevant or integrity-relevant failures."""

    CRITICAL = "CRITICAL"
    """Unexpected faults that need immediate attention."""


class ViolationLike(Protocol):
    """Anything that identifies a validation failure by path and message."""

    @property
    def path(self) -> str:
        """Dotted field path of the failing value."""
        ...

    @property
    def message(self) -> str:
        """Human-readable description of the failure."""
        ...


class HubKitError(Exception):
    """Base exception class for all hub-kit request-handling errors.

    Args:
        error_code: Member of the closed ``ErrorCode`` taxonomy
        message: Human-readable error message (returned to the client)
        severity: Severity level of the error (defaults to MEDIUM)
        details: JSON-serializable details returned to the client
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        details: Any = None,  # noqa: ANN401 - any JSON-serializable value
        cause: Exception | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.severity = severity
        self.details = details
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    @property
    def code(self) -> str:
        """Stable string code as it appears in the response envelope."""
        return self.error_code.value

    @property
    def status_code(self) -> int:
        """HTTP status mapped from the error code."""
        return ERROR_STATUS_MAP[self.error_code]

    @property
    def is_expected(self) -> bool:
        """Determine if this is an expected error based on severity.

        Expected errors come from client input or business rules and are
        logged at WARNING without alerting.

        Returns:
            bool: True if the error is expected (LOW or MEDIUM severity)
        """
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def to_dict(self) -> dict[str, Any]:
        """Render the ``error`` member of the response envelope.

        Returns:
            dict[str, Any]: ``{code, message}`` plus ``details`` when present.
        """
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the error code and message
        """
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name, error code, message, severity,
                and details
        """
        class_name = self.__class__.__name__
        details_str = f", details={self.details!r}" if self.details is not None else ""
        return (
            f"{class_name}(error_code='{self.code}', "
            f"message='{self.message}', severity={self.severity.value}{details_str})"
        )


class BadRequestError(HubKitError):
    """Exception raised when the request body cannot be read at all."""

    def __init__(
        self,
        message: str = "Bad request",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.BAD_REQUEST, message, Severity.LOW, details, cause)


class UnauthorizedError(HubKitError):
    """Exception raised when authentication fails.

    Raised for a missing Authorization header, a malformed or tampered token,
    a token signed with another secret and an expired token.
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message, Severity.HIGH, details, cause)


class ForbiddenError(HubKitError):
    """Exception raised when an authenticated principal lacks a required role."""

    def __init__(
        self,
        message: str = "Forbidden",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.FORBIDDEN, message, Severity.HIGH, details, cause)


class NotFoundError(HubKitError):
    """Exception raised when a requested resource cannot be found."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, Severity.LOW, details, cause)


class ConflictError(HubKitError):
    """Exception raised when a request conflicts with existing state."""

    def __init__(
        self,
        message: str = "Conflict",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.CONFLICT, message, Severity.LOW, details, cause)


class ValidationError(HubKitError):
    """Exception raised when input fails schema validation.

    The violations are rendered into ``details`` as an ordered list of
    ``{path, message}`` objects, one per failure found in a single pass.

    Args:
        message: Summary of the validation failure
        violations: Every violation collected for the request part
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str = "Validation failed",
        violations: Iterable[ViolationLike] = (),
        cause: Exception | None = None,
    ) -> None:
        self.violations = tuple(violations)
        details = [{"path": v.path, "message": v.message} for v in self.violations]
        super().__init__(
            ErrorCode.VALIDATION_ERROR,
            message,
            Severity.LOW,
            details or None,
            cause,
        )


class InternalError(HubKitError):
    """Exception raised for faults that must surface as a generic 500."""

    def __init__(
        self,
        message: str = "Internal server error",
        details: Any = None,  # noqa: ANN401
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.INTERNAL_ERROR, message, Severity.CRITICAL, details, cause
        )

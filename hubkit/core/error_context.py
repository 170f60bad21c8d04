"""Sensitive data sanitization for secure error logging.

The request pipeline never logs raw bodies, but error contexts, exception
attributes and header maps can still carry secrets. Everything passed to the
logger from the pipeline goes through this module first.

Key features:
- **Pattern matching**: Regex-based detection of sensitive field names
- **Caller-supplied fields**: Additional sensitive names passed explicitly
- **Deep sanitization**: Recursive handling of nested data structures
- **Header protection**: Special handling for sensitive HTTP headers

Sanitization is applied to logged copies only; original data is unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from re import Pattern
from typing import Any, Final

from hubkit.core.constants import REDACTED, SENSITIVE_HEADERS
from hubkit.core.types import ErrorContext

# Type alias for values we can sanitize
SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

# Default sensitive field patterns - covers common cases
DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|authorization|"
    r"credential|private[_-]?key|access[_-]?key|secret[_-]?key|session|"
    r"ssn|social[_-]?security|pin|cvv|cvc|card[_-]?number|connection[_-]?string)",
    re.IGNORECASE,
)

# Maximum depth for nested structure sanitization
MAX_DEPTH: Final[int] = 10


def is_sensitive_field(field_name: str, extra_fields: Iterable[str] = ()) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.
        extra_fields: Additional substrings that mark a field as sensitive.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(extra.lower() in field_lower for extra in extra_fields)


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive.

    Args:
        header_name: The header name to check (case-insensitive).

    Returns:
        bool: True if the header is sensitive.
    """
    return header_name.lower() in SENSITIVE_HEADERS


def sanitize_value(
    value: SanitizableValue,
    field_name: str = "",
    depth: int = 0,
    extra_fields: tuple[str, ...] = (),
) -> SanitizableValue:
    """Sanitize a value if it appears to be sensitive.

    Nested dicts, lists and tuples are sanitized recursively up to MAX_DEPTH.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.
        extra_fields: Additional sensitive field names.

    Returns:
        SanitizableValue: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name, extra_fields):
        return REDACTED

    if isinstance(value, dict):
        return {
            k: sanitize_value(v, k, depth + 1, extra_fields) for k, v in value.items()
        }

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1, extra_fields) for item in value]

    if isinstance(value, tuple):
        return tuple(
            sanitize_value(item, "", depth + 1, extra_fields) for item in value
        )

    return value


def sanitize_dict(
    data: dict[str, Any], extra_fields: Iterable[str] = ()
) -> dict[str, Any]:
    """Sanitize a dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize.
        extra_fields: Additional sensitive field names.

    Returns:
        dict[str, Any]: New dictionary with sensitive values redacted.
    """
    extra = tuple(extra_fields)
    return {key: sanitize_value(value, key, 0, extra) for key, value in data.items()}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Sanitize HTTP headers.

    Args:
        headers: Headers dictionary.

    Returns:
        dict[str, str]: Sanitized headers.
    """
    return {k: REDACTED if is_sensitive_header(k) else v for k, v in headers.items()}


def sanitize_error_context(
    error: Exception,
    context: ErrorContext | None = None,
    extra_fields: Iterable[str] = (),
) -> ErrorContext:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional context to include (will be sanitized).
        extra_fields: Additional sensitive field names.

    Returns:
        ErrorContext: Sanitized error context safe for logging.
    """
    extra = tuple(extra_fields)
    error_context: ErrorContext = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context, extra))

    # Exception attributes (details, violations, ...) are sanitized too
    if hasattr(error, "__dict__"):
        error_attrs = {k: v for k, v in error.__dict__.items() if not k.startswith("_")}
        if error_attrs:
            error_context["error_attributes"] = sanitize_dict(error_attrs, extra)

    return error_context

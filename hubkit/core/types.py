"""Type aliases for dynamic data structures throughout hub-kit.

Request bodies, query maps, validated values and compiled contract fragments
are all JSON-shaped and cannot be typed more precisely than this.
"""

from typing import Any

# A rendered contract fragment (one node of the interface document)
type Fragment = dict[str, Any]

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]

# Context dictionary for logging additional information
type LogContext = dict[str, Any]

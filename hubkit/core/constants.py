"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# HTTP headers (lowercase, headers are matched case-insensitively)
CORRELATION_ID_HEADER = "x-correlation-id"
AUTHORIZATION_HEADER = "authorization"
CONTENT_TYPE_HEADER = "content-type"
BEARER_SCHEME = "bearer"

# Content types
JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"

# Security and redaction
REDACTED = "[REDACTED]"
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-api-key",
    "x-auth-token",
    "x-csrf-token",
    "set-cookie",
    "x-secret-key",
    "proxy-authorization",
}

# Token verification
DEFAULT_JWT_ALGORITHM = "HS256"

# Interface document
OPENAPI_VERSION = "3.0.3"
BEARER_SECURITY_SCHEME = "bearerAuth"

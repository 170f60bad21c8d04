"""Core infrastructure package shared by every hub-kit component.

- **config**: Caller-side configuration with environment support
- **constants**: Header names, redaction markers and media types
- **context**: Correlation ID generation and request-scoped storage
- **exceptions**: Closed error taxonomy with stable codes and HTTP statuses
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Loguru setup with console and JSON formatters
- **types**: Type aliases for JSON-shaped data

Nothing in this package reads the environment on behalf of the request
pipeline or the contract compiler; only ``config`` does, and only when the
caller asks for it.
"""

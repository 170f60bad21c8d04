"""Request context management utilities for correlation IDs."""

import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

# Context variable for storing correlation ID across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestContext:
    """Manages request context using contextvars for async-safe storage.

    The pipeline binds the correlation ID here for the duration of one
    request so that code called by a business handler (services, clients)
    can read it without it being threaded through every signature. Each
    asyncio task sees its own copy, so concurrent requests never observe
    each other's values.
    """

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context.

        Returns:
            str | None: The correlation ID if set, None otherwise.
        """
        return _correlation_id_var.get()

    @staticmethod
    @contextmanager
    def bind(correlation_id: str) -> Generator[str]:
        """Bind a correlation ID for the enclosed block only.

        The previous value is restored on exit, even when the block raises.

        Args:
            correlation_id: The correlation ID to expose inside the block.

        Yields:
            str: The bound correlation ID.
        """
        token = _correlation_id_var.set(correlation_id)
        try:
            yield correlation_id
        finally:
            _correlation_id_var.reset(token)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.

    Examples:
        >>> correlation_id = generate_correlation_id()
        >>> len(correlation_id)
        36
    """
    return str(uuid.uuid4())

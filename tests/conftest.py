"""Root conftest.py for the hub-kit test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest

from hubkit.security.auth import JwtConfig, create_token

TEST_SECRET = "test-secret-key-with-at-least-32-bytes!"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def jwt_config() -> JwtConfig:
    """Provide token configuration signed with the test secret.

    Returns:
        JwtConfig: HS256 configuration without issuer/audience checks.
    """
    return JwtConfig(secret=TEST_SECRET)


@pytest.fixture
def make_token(jwt_config: JwtConfig) -> Callable[..., str]:
    """Provide a factory for tokens accepted by ``jwt_config``.

    Returns:
        Callable[..., str]: ``make_token(role="member", **claims)``.
    """

    def factory(
        role: str | None = "member",
        expires_in: timedelta | None = timedelta(hours=1),
        **claims: Any,  # noqa: ANN401
    ) -> str:
        payload: dict[str, Any] = {"sub": "user-123", **claims}
        if role is not None:
            payload["role"] = role
        return create_token(payload, jwt_config, expires_in)

    return factory

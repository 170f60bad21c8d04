"""Shared fixtures for unit tests."""

import os
import sys
from collections.abc import Generator
from typing import Any

import pytest
from loguru import logger

from hubkit.core.config import get_settings
from hubkit.core.logging import _state
from hubkit.pipeline.models import HandlerConfig, HttpRequest, PipelineState


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove application environment variables that could leak into Settings.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "AUTH_CONFIG__",
        "OPENAPI_URL",
        "HEALTH_URL",
        "PORT",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def reset_logging_state() -> Generator[None]:
    """Allow ``setup_logging`` to run again and restore loguru afterwards."""
    _state.configured = False
    yield
    _state.configured = False
    _state.sensitive_fields = ()
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture loguru records emitted during the test.

    Yields:
        list[dict[str, Any]]: The captured records, in emission order.
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level=0)
    yield records
    logger.remove(handler_id)


@pytest.fixture
def make_request() -> Any:  # noqa: ANN401
    """Provide a factory for ``HttpRequest`` objects with sensible defaults."""

    def factory(
        method: str = "GET",
        url: str = "http://testserver/items",
        **kwargs: Any,  # noqa: ANN401
    ) -> HttpRequest:
        return HttpRequest(method=method, url=url, **kwargs)

    return factory


@pytest.fixture
def make_state(make_request: Any) -> Any:  # noqa: ANN401
    """Provide a factory for pipeline states with a resolved correlation id."""

    def factory(
        config: HandlerConfig | None = None,
        request: HttpRequest | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> PipelineState:
        return PipelineState(
            request=request or make_request(),
            config=config or HandlerConfig(),
            correlation_id=kwargs.pop("correlation_id", "cid-test"),
            **kwargs,
        )

    return factory

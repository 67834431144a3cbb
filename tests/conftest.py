"""Pytest configuration for shared fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from loguru import logger

from okx_bridge.core.config import BridgeConfig

TEST_SECRET = "tv-shared-secret"


@pytest.fixture(scope="session", autouse=True)
def silence_loguru_handlers() -> Iterator[None]:
    """Route Loguru output to a no-op sink during tests to avoid closed stream errors."""
    logger.remove()
    logger.add(lambda _: None, catch=True)
    yield


@pytest.fixture
def config_factory() -> Callable[..., BridgeConfig]:
    """Build a BridgeConfig with test credentials, ignoring any local .env file."""

    def _make(**overrides: object) -> BridgeConfig:
        values: dict[str, object] = {
            "tv_secret": TEST_SECRET,
            "okx_api_key": "test-api-key",
            "okx_api_secret": "test-api-secret",
            "okx_api_passphrase": "test-passphrase",
        }
        values.update(overrides)
        return BridgeConfig(_env_file=None, **values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def config(config_factory: Callable[..., BridgeConfig]) -> BridgeConfig:
    return config_factory()


@pytest.fixture
def tv_secret() -> str:
    return TEST_SECRET

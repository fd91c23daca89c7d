"""Shared fixtures."""

from unittest.mock import AsyncMock

import pytest

from infoplu_mcp.client import InfoPluClient
from infoplu_mcp.config import Settings


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url="https://example.test/api")


@pytest.fixture
def client(settings: Settings) -> InfoPluClient:
    """Client whose get() is mocked; no network involved."""
    c = InfoPluClient(settings)
    c.get = AsyncMock()  # type: ignore[method-assign]
    return c


@pytest.fixture
def unlimited_client() -> InfoPluClient:
    """Same as client, with an output cap large enough to never truncate."""
    c = InfoPluClient(Settings(base_url="https://example.test/api", character_limit=10**9))
    c.get = AsyncMock()  # type: ignore[method-assign]
    return c

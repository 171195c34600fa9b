"""Pytest fixtures and configuration for the test suite."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastmcp import FastMCP
from pydantic import HttpUrl
from pytest_mock import AsyncMockType, MockerFixture

from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.config import ServerConfig
from vikunja_mcp.tools.tasks import TaskTools


@pytest.fixture
def default_config() -> ServerConfig:
    """Provide a default ServerConfig instance for testing.

    Returns:
        ServerConfig: A configured ServerConfig instance with test values.
    """
    return ServerConfig(
        vikunja_api_token="test_token_123",
        vikunja_base_url=HttpUrl("https://vikunja.example.com/api/v1"),
        log_level="INFO",
        config_file=None,
    )


@pytest.fixture
def mcp() -> FastMCP:
    """Provide a FastMCP instance for testing."""
    return FastMCP("test-server")


@pytest.fixture
def config() -> ServerConfig:
    """Provide a ServerConfig instance for testing."""
    return ServerConfig(
        vikunja_api_token="test_token",
        vikunja_base_url=HttpUrl("https://vikunja.example.com/api/v1"),
    )


@pytest.fixture
def client(config: ServerConfig) -> VikunjaClient:
    """Provide a VikunjaClient instance for testing."""
    return VikunjaClient(config)


@pytest.fixture
def task_tools(mcp: FastMCP, client: VikunjaClient) -> TaskTools:
    """Provide a TaskTools instance bound to the test client."""
    return TaskTools(mcp, client)


@pytest.fixture
def async_ctx(mocker: MockerFixture) -> AsyncMockType:
    """Provide an async context mock for testing.

    Returns:
        AsyncMock: An async context mock with a test session ID.
    """
    mock_ctx = mocker.AsyncMock()
    mock_ctx.session_id = "test-session-123"
    return mock_ctx


@pytest.fixture
def temp_config_file() -> Generator[str, None, None]:
    """Create a temporary TOML config file.

    Yields:
        str: Path to the temporary config file.
    """
    config_content = """
vikunja_api_token = "file_token"
vikunja_base_url = "https://file.example.com/api/v1"
log_level = "WARNING"
timeout_read = 60.0
"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
        f.write(config_content)
        temp_path = f.name

    try:
        yield temp_path
    finally:
        Path(temp_path).unlink(missing_ok=True)


@pytest.fixture(autouse=True)
def no_signal_handlers(mocker: MockerFixture) -> MagicMock:
    """Keep CoreServer from replacing the test runner's signal handlers."""
    return mocker.patch("vikunja_mcp.main.signal.signal")

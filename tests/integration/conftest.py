"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests: Ollama is
replaced by a mock client and provider discovery by an in-memory fake.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    By default every chat request is answered with a fixed reply.
    """
    with patch("toolhub_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True

        async def default_stream(*args, **kwargs):
            yield {
                "message": {"role": "assistant", "content": "Hello from the model"},
                "done": True,
            }

        mock_instance.chat_stream = default_stream

        # Return the mock instance when OllamaClient is instantiated
        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def provider_connections(make_connection):
    """The providers the fake discovery reports: files (2 tools) and web (1 tool)."""
    return [
        make_connection("files", "read_file", "write_file"),
        make_connection("web", "fetch"),
    ]


@pytest.fixture(autouse=True)
def fake_discovery(provider_connections, make_discovery):
    """Replace provider discovery so no processes are spawned."""
    discovery = make_discovery(provider_connections)
    with patch("toolhub_server.app.ProviderDiscovery", return_value=discovery):
        yield discovery

"""Pytest configuration and shared fixtures for toolhub-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup, and in-memory stand-ins
for provider connections, discovery and the reasoning engine.
"""

import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolhub_server import create_app
from toolhub_server.config import ToolhubServerSettings
from toolhub_server.providers import DiscoveredProvider
from toolhub_server.reasoning import ReasoningEngine, ReasoningSession
from toolhub_server.tools import Tool

ECHO_PROVIDER = Path(__file__).parent / "fixtures" / "echo_provider.py"


class FakeConnection:
    """In-memory provider connection hosting a fixed set of tools."""

    def __init__(self, name: str, *tool_names: str, fail_disconnect: bool = False):
        self.name = name
        self.is_connected = True
        self.disconnect_calls = 0
        self.fail_disconnect = fail_disconnect
        self.calls: list[tuple[str, dict]] = []
        self.tools = [
            Tool(name=tool_name, description=f"{tool_name} from {name}", provider=self)
            for tool_name in tool_names
        ]

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.is_connected = False
        if self.fail_disconnect:
            raise RuntimeError("pipe already closed")

    async def call_tool(self, name: str, arguments: dict) -> str:
        self.calls.append((name, arguments))
        return f"{name} ran with {arguments}"


class FakeDiscovery:
    """Discovery that yields FakeConnections in order.

    When ``gate`` is given, every provider after the first waits for it,
    which lets tests hold a load in the LOADING state.
    """

    def __init__(self, connections=(), gate: asyncio.Event | None = None):
        self.connections = list(connections)
        self.gate = gate
        self.passes = 0

    async def iter_providers(self):
        self.passes += 1
        for index, connection in enumerate(self.connections):
            await asyncio.sleep(0)
            if index > 0 and self.gate is not None:
                await self.gate.wait()
            connection.is_connected = True
            yield DiscoveredProvider(connection=connection, tools=connection.tools)

    async def discover(self):
        return [provider async for provider in self.iter_providers()]


class FakeBinding(ReasoningSession):
    """Reasoning binding that echoes input, or fails when told to."""

    def __init__(self, instructions, temperature, max_response_tokens, tools):
        super().__init__(instructions, temperature, max_response_tokens, tools)
        self.fail = False
        self.delay = 0.0
        self.inputs: list[str] = []
        self.active = 0
        self.max_active = 0

    async def respond(self, user_input: str) -> str:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            self.inputs.append(user_input)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise RuntimeError("model unavailable")
            return f"echo: {user_input}"
        finally:
            self.active -= 1


class FakeEngine(ReasoningEngine):
    """Engine that records every binding it builds."""

    def __init__(self):
        self.bindings: list[FakeBinding] = []

    def create_session(self, instructions, temperature, max_response_tokens, tools):
        binding = FakeBinding(instructions, temperature, max_response_tokens, tools)
        self.bindings.append(binding)
        return binding


@pytest.fixture
def make_connection():
    """Factory for FakeConnection: make_connection("name", "tool_a", ...)."""
    return FakeConnection


@pytest.fixture
def make_discovery():
    """Factory for FakeDiscovery."""
    return FakeDiscovery


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def echo_provider_command() -> list[str]:
    """Command line that starts the stdio echo provider used in tests."""
    return [sys.executable, str(ECHO_PROVIDER)]


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with an isolated temporary data directory.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        ToolhubServerSettings: Settings instance configured for testing.
    """
    return ToolhubServerSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        data_dir=str(tmp_path),
        providers_file="mcp_servers.json",
        load_tools_on_startup=False,
        provider_request_timeout=10.0,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

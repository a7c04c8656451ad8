"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject the long-lived objects created at startup.
"""

from functools import lru_cache
from typing import Any

from fastapi import HTTPException, Request

from toolhub_server.config import ToolhubServerSettings
from toolhub_server.notifications import ChangeNotifier
from toolhub_server.ollama import OllamaClient
from toolhub_server.providers import ProviderConfigStore
from toolhub_server.sessions import SessionOrchestrator
from toolhub_server.tools import ToolRegistry, ToolSupervisor


@lru_cache
def get_settings() -> ToolhubServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLHUB_ prefix.

    Returns:
        ToolhubServerSettings: The application configuration settings.
    """
    return ToolhubServerSettings()


def _get_state(request: Request, name: str, label: str) -> Any:
    if not hasattr(request.app.state, name):
        raise HTTPException(
            status_code=503,
            detail=f"{label} not initialized",
        )
    return getattr(request.app.state, name)


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    return _get_state(request, "ollama_client", "Ollama client")


def get_tool_registry(request: Request) -> ToolRegistry:
    """Get the shared ToolRegistry from app state.

    Raises:
        HTTPException: If the registry is not initialized (503 Service Unavailable).
    """
    return _get_state(request, "tool_registry", "Tool registry")


def get_tool_supervisor(request: Request) -> ToolSupervisor:
    """Get the ToolSupervisor from app state."""
    return _get_state(request, "tool_supervisor", "Tool supervisor")


def get_orchestrator(request: Request) -> SessionOrchestrator:
    """Get the SessionOrchestrator from app state."""
    return _get_state(request, "orchestrator", "Session orchestrator")


def get_notifier(request: Request) -> ChangeNotifier:
    """Get the ChangeNotifier from app state."""
    return _get_state(request, "notifier", "Change notifier")


def get_provider_config_store(request: Request) -> ProviderConfigStore:
    """Get a ProviderConfigStore for the configured providers file.

    Uses settings from app.state so tests can point at their own file.
    """
    settings = request.app.state.settings
    return ProviderConfigStore(settings.resolved_providers_file)

"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolhub_server.config import ToolhubServerSettings
from toolhub_server.notifications import ChangeNotifier
from toolhub_server.ollama import OllamaClient
from toolhub_server.providers import ProviderConfigStore, ProviderDiscovery
from toolhub_server.reasoning import OllamaReasoningEngine
from toolhub_server.routers import chat, health, providers, sessions, tools
from toolhub_server.sessions import SessionOrchestrator
from toolhub_server.tools import ToolRegistry, ToolSupervisor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Long-lived objects (Ollama client, tool registry, supervisor and session
    orchestrator) are created once at startup and stored in app.state for
    reuse across all requests. On shutdown, pending session initializations
    are cancelled and every provider process is disconnected exactly once.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolhubServerSettings = app.state.settings

    # Startup: Initialize Ollama client
    ollama_client = OllamaClient(host=settings.ollama_host)
    app.state.ollama_client = ollama_client
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    connected = await ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    # Tool registry and its collaborators
    notifier = ChangeNotifier()
    discovery = ProviderDiscovery(
        ProviderConfigStore(settings.resolved_providers_file),
        request_timeout=settings.provider_request_timeout,
    )
    registry = ToolRegistry(
        discovery,
        notifier=notifier,
        general_bucket_name=settings.general_bucket_name,
    )
    engine = OllamaReasoningEngine(
        ollama_client,
        model=settings.model,
        max_tool_rounds=settings.max_tool_rounds,
    )

    supervisor = ToolSupervisor(registry)
    orchestrator = SessionOrchestrator(
        registry,
        engine,
        notifier=notifier,
        default_instructions=settings.default_instructions,
        default_temperature=settings.default_temperature,
        default_max_response_tokens=settings.max_response_tokens,
    )

    app.state.notifier = notifier
    app.state.tool_registry = registry
    app.state.tool_supervisor = supervisor
    app.state.orchestrator = orchestrator

    warmup: asyncio.Task[None] | None = None
    if settings.load_tools_on_startup:
        warmup = asyncio.create_task(registry.load_if_needed(), name="tool-warmup")

    yield

    # Shutdown: Clean up resources
    await orchestrator.shutdown()
    await supervisor.shutdown()
    if warmup is not None and not warmup.done():
        warmup.cancel()

    await ollama_client.close()
    logger.info("Ollama client closed")


def create_app(settings: ToolhubServerSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a FastAPI instance with all routers,
    middleware, and configuration applied. It can accept an optional
    settings object for testing or explicit configuration.

    Args:
        settings: Optional ToolhubServerSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from toolhub_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="toolhub-server",
        description="Headless FastAPI server for tool-augmented chat sessions via Ollama",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(providers.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)

    return app

"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from toolhub_server import __version__
from toolhub_server.models.health import HealthResponse
from toolhub_server.ollama import OllamaClient
from toolhub_server.tools import ToolRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of the toolhub-server,
    Ollama connectivity if the client is initialized, and the tool
    catalog load state.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    ollama_connected = None
    ollama_host = None
    tools_state = None
    tool_count = 0

    # Check if Ollama client is available and test connectivity
    if hasattr(request.app.state, "ollama_client"):
        ollama_client: OllamaClient = request.app.state.ollama_client
        ollama_host = ollama_client.host

        try:
            ollama_connected = await ollama_client.check_connection()
            logger.debug(f"Ollama connectivity check: {ollama_connected}")
        except Exception as e:
            logger.warning(f"Ollama connectivity check failed: {e}")
            ollama_connected = False

    if hasattr(request.app.state, "tool_registry"):
        registry: ToolRegistry = request.app.state.tool_registry
        tools_state = registry.state.value
        tool_count = len(registry.tools)

    return HealthResponse(
        status="ok",
        version=__version__,
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        tools_state=tools_state,
        tool_count=tool_count,
    )

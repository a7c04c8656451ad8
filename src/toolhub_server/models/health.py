"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolhub-server.
        ollama_connected: Optional boolean indicating Ollama connectivity.
        ollama_host: Optional string with the Ollama host URL.
        tools_state: Load state of the tool catalog.
        tool_count: Number of tools in the catalog.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolhub-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    tools_state: str | None = Field(
        default=None,
        description="Tool catalog load state: not_loaded, loading or loaded",
    )
    tool_count: int = Field(default=0, description="Number of tools in the catalog")

"""Pydantic models for provider configuration API requests and responses."""

from pydantic import BaseModel, Field


class ProviderConfigModel(BaseModel):
    """Launch configuration for one tool provider."""

    command: str = Field(..., min_length=1, description="Executable to run")
    args: list[str] = Field(default_factory=list, description="Command arguments")
    env: dict[str, str] = Field(
        default_factory=dict, description="Extra environment variables"
    )


class AddProviderRequest(ProviderConfigModel):
    """Request body for adding a provider."""

    name: str = Field(..., min_length=1, description="Unique provider name")


class ProviderResponse(ProviderConfigModel):
    """A configured provider and its live status."""

    name: str
    connected: bool = Field(description="Whether a live connection backs the catalog")
    tool_count: int = Field(description="Catalog tools owned by this provider")


class ProviderListResponse(BaseModel):
    """Response model for listing configured providers."""

    providers: list[ProviderResponse]

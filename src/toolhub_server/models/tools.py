"""Pydantic models for tool catalog API requests and responses."""

from pydantic import BaseModel, Field


class ToolResponse(BaseModel):
    """A single tool in the catalog."""

    name: str
    description: str
    provider: str | None = Field(None, description="Owning provider, if any")
    enabled: bool = Field(description="Whether the global selection includes it")


class ToolListResponse(BaseModel):
    """Response model for listing the catalog."""

    state: str = Field(description="Catalog load state")
    tools: list[ToolResponse]
    total: int = Field(description="Size of the whole catalog, ignoring the query")
    enabled_count: int = Field(description="Tools the global selection resolves to")


class ToolGroupResponse(BaseModel):
    """Tools owned by one provider, with the aggregate toggle state."""

    provider: str
    toggle_state: str = Field(description="on, off or mixed")
    tools: list[ToolResponse]


class ToolGroupsResponse(BaseModel):
    """Response model for the grouped catalog."""

    groups: list[ToolGroupResponse]


class SetToolEnabledRequest(BaseModel):
    """Request body for enabling or disabling one tool globally."""

    enabled: bool


class EnabledToolsResponse(BaseModel):
    """The global enabled tool selection."""

    enabled_tool_names: list[str]

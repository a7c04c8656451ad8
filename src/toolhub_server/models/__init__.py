"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolhub_server.models.chat import ChatRequest, ChatResponse
from toolhub_server.models.health import HealthResponse
from toolhub_server.models.providers import (
    AddProviderRequest,
    ProviderListResponse,
    ProviderResponse,
)
from toolhub_server.models.sessions import (
    CreateSessionRequest,
    MessageResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionResponse,
    UpdateSessionToolsRequest,
)
from toolhub_server.models.tools import (
    EnabledToolsResponse,
    SetToolEnabledRequest,
    ToolGroupsResponse,
    ToolListResponse,
)

__all__ = [
    "AddProviderRequest",
    "ChatRequest",
    "ChatResponse",
    "CreateSessionRequest",
    "EnabledToolsResponse",
    "HealthResponse",
    "MessageResponse",
    "ProviderListResponse",
    "ProviderResponse",
    "SessionDetailResponse",
    "SessionListResponse",
    "SessionResponse",
    "SetToolEnabledRequest",
    "ToolGroupsResponse",
    "ToolListResponse",
    "UpdateSessionToolsRequest",
]

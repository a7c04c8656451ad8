"""Pydantic models for session API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field


class CreateSessionRequest(BaseModel):
    """Request body for creating a new session."""

    system_instructions: str | None = Field(
        None, description="Instructions for the model (default: server default)"
    )
    temperature: float | None = Field(
        None, ge=0.0, le=2.0, description="Sampling temperature"
    )
    max_response_tokens: int | None = Field(
        None, gt=0, description="Optional cap on reply length in tokens"
    )
    enabled_tool_names: list[str] | None = Field(
        None,
        description="Tools enabled for this session; null follows the global selection, empty means all",
    )
    title: str | None = Field(None, description="Optional initial title")


class UpdateSessionToolsRequest(BaseModel):
    """Request body for replacing a session's tool selection."""

    enabled_tool_names: list[str] | None = Field(
        default_factory=list,
        description=(
            "Enabled tool names; an empty list enables every tool, "
            "null returns the session to the global selection"
        ),
    )


class MessageResponse(BaseModel):
    """Response model for a single message."""

    message_id: str
    role: str
    content: str
    is_from_user: bool
    timestamp: str

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """Response model for a single session (metadata only)."""

    session_id: str
    title: str
    system_instructions: str
    temperature: float
    max_response_tokens: int | None
    enabled_tool_names: list[str] | None = Field(
        None, description="Session tool override; null when following the global selection"
    )
    active_tools: list[str] = Field(
        default_factory=list,
        description="Tools bound into the session's reasoning binding",
    )
    initialized: bool
    created_at: str
    updated_at: str
    message_count: int


class SessionListItem(BaseModel):
    """A session item in the list response."""

    session_id: str
    title: str
    created_at: str
    updated_at: str
    message_count: int
    preview: str = Field("", description="Preview of first user message")


class SessionListResponse(BaseModel):
    """Response model for listing sessions."""

    sessions: list[SessionListItem]


class SessionDetailResponse(SessionResponse):
    """Response model for a session with full message history."""

    messages: list[MessageResponse]


class MessagesResponse(BaseModel):
    """Response model for getting session messages."""

    messages: list[MessageResponse]

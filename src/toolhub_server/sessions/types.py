"""Data types for session management.

This module defines the core data structures for chat sessions, messages,
and session configuration.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_TITLE = "New Chat"
DEFAULT_INSTRUCTIONS = "You are a helpful assistant."
DEFAULT_TEMPERATURE = 0.7
APOLOGY_MESSAGE = (
    "I apologize, but I encountered an error processing your request. "
    "Please try again."
)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def generate_id() -> str:
    """Generate a new unique identifier.

    Returns:
        10-character hexadecimal string
    """
    return uuid.uuid4().hex[:10]


@dataclass(frozen=True)
class Message:
    """A single chat message. Never changed once created."""

    content: str
    is_from_user: bool
    message_id: str = field(default_factory=generate_id)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def role(self) -> str:
        return "user" if self.is_from_user else "assistant"


@dataclass
class SessionConfig:
    """Options for creating a new session.

    Fields left as None fall back to the server defaults; a None
    enabled_tool_names makes the session follow the registry-wide selection,
    including later changes to it.
    """

    system_instructions: str | None = None
    temperature: float | None = None
    max_response_tokens: int | None = None
    enabled_tool_names: set[str] | None = None
    title: str | None = None

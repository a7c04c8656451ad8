"""Session management for toolhub-server.

This package provides in-memory chat sessions, message history, and the
orchestrator that binds each session to a filtered view of the tool catalog.
"""

from toolhub_server.sessions.orchestrator import SessionOrchestrator
from toolhub_server.sessions.session import ChatSession, derive_title
from toolhub_server.sessions.types import (
    APOLOGY_MESSAGE,
    DEFAULT_TITLE,
    Message,
    SessionConfig,
)

__all__ = [
    # Core classes
    "ChatSession",
    "SessionOrchestrator",
    # Data types
    "Message",
    "SessionConfig",
    # Helpers and constants
    "APOLOGY_MESSAGE",
    "DEFAULT_TITLE",
    "derive_title",
]

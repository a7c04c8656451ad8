"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, tools,
providers, sessions, chat).
"""

from toolhub_server.routers import chat, health, providers, sessions, tools

__all__ = [
    "chat",
    "health",
    "providers",
    "sessions",
    "tools",
]

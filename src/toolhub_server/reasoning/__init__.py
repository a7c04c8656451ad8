"""Reasoning engine bindings for chat sessions."""

from toolhub_server.reasoning.base import ReasoningEngine, ReasoningSession
from toolhub_server.reasoning.ollama_engine import (
    OllamaReasoningEngine,
    OllamaReasoningSession,
)

__all__ = [
    "OllamaReasoningEngine",
    "OllamaReasoningSession",
    "ReasoningEngine",
    "ReasoningSession",
]

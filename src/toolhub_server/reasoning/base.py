"""Abstract reasoning engine interface.

The orchestrator only needs two things from a reasoning engine: a way to
build a per-conversation binding from instructions, sampling parameters
and a tool list, and a way to ask that binding for a reply.
"""

from abc import ABC, abstractmethod

from toolhub_server.tools.types import Tool


class ReasoningSession(ABC):
    """A reasoning binding for one chat session."""

    def __init__(
        self,
        instructions: str,
        temperature: float,
        max_response_tokens: int | None,
        tools: list[Tool],
    ):
        self.instructions = instructions
        self.temperature = temperature
        self.max_response_tokens = max_response_tokens
        self.tools = list(tools)

    @property
    def tool_names(self) -> list[str]:
        return [tool.name for tool in self.tools]

    @abstractmethod
    async def respond(self, user_input: str) -> str:
        """Produce a reply to ``user_input``.

        Raises:
            Exception: Any failure; callers treat every exception as a failed reply
        """


class ReasoningEngine(ABC):
    """Factory for reasoning bindings."""

    @abstractmethod
    def create_session(
        self,
        instructions: str,
        temperature: float,
        max_response_tokens: int | None,
        tools: list[Tool],
    ) -> ReasoningSession:
        """Build a new binding. Must not perform I/O."""

"""ChatSession class for managing individual chat sessions.

This module provides the ChatSession class which handles:
- Appending messages to the conversation history
- Deriving a title from the first user message
- Holding the session's tool selection and reasoning binding
"""

import logging

from toolhub_server.reasoning.base import ReasoningSession
from toolhub_server.sessions.types import (
    DEFAULT_INSTRUCTIONS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TITLE,
    Message,
    generate_id,
    utc_timestamp,
)
from toolhub_server.tools.types import Tool

logger = logging.getLogger(__name__)

TITLE_WORD_LIMIT = 4


def derive_title(content: str) -> str | None:
    """Build a title from the first words of a message.

    Returns:
        The first four words joined by single spaces, with "..." appended
        when the message has more words, or None for a blank message
    """
    words = content.split()
    if not words:
        return None

    title = " ".join(words[:TITLE_WORD_LIMIT])
    if len(words) > TITLE_WORD_LIMIT:
        title += "..."
    return title


class ChatSession:
    """Represents a single chat session held in memory.

    The message history is append-only. The reasoning binding is replaced
    wholesale whenever the session is (re)initialized.
    """

    def __init__(
        self,
        session_id: str | None = None,
        title: str = DEFAULT_TITLE,
        system_instructions: str = DEFAULT_INSTRUCTIONS,
        temperature: float = DEFAULT_TEMPERATURE,
        max_response_tokens: int | None = None,
        enabled_tool_names: set[str] | None = None,
        messages: list[Message] | None = None,
    ):
        """Initialize a ChatSession.

        Args:
            session_id: Unique session identifier (default: generated 10-char hex)
            title: Display title (default: "New Chat")
            system_instructions: Instructions handed to the reasoning engine
            temperature: Sampling temperature
            max_response_tokens: Optional cap on reply length
            enabled_tool_names: Session tool override; None follows the global
                selection, empty means all tools
            messages: Initial message history (default: empty)
        """
        self.session_id = session_id or generate_id()
        self.title = title
        self.system_instructions = system_instructions
        self.temperature = temperature
        self.max_response_tokens = max_response_tokens
        self.enabled_tool_names: set[str] | None = (
            set(enabled_tool_names) if enabled_tool_names is not None else None
        )
        self.messages: list[Message] = list(messages or [])

        self.binding: ReasoningSession | None = None
        self.tools: list[Tool] = []

        now = utc_timestamp()
        self.created_at = now
        self.updated_at = now

    @property
    def is_initialized(self) -> bool:
        return self.binding is not None

    def add_message(self, message: Message) -> None:
        """Append a message and derive the title from the first user message."""
        self.messages.append(message)
        self.updated_at = utc_timestamp()

        if self.title == DEFAULT_TITLE and message.is_from_user:
            title = derive_title(message.content)
            if title is not None:
                self.title = title
                logger.debug(f"Session {self.session_id} titled '{title}'")

    def clear_messages(self) -> None:
        """Remove all messages. Title and binding are kept."""
        self.messages = []
        self.updated_at = utc_timestamp()

    def set_enabled_tool_names(self, names: set[str] | None) -> None:
        self.enabled_tool_names = set(names) if names is not None else None
        self.updated_at = utc_timestamp()

    def bind(self, binding: ReasoningSession, tools: list[Tool]) -> None:
        """Replace the reasoning binding and the tool view it was built with."""
        self.binding = binding
        self.tools = list(tools)

    def get_preview(self, max_length: int = 100) -> str:
        """Get a preview of the session (first user message).

        Args:
            max_length: Maximum length of the preview

        Returns:
            Preview string, truncated if necessary
        """
        for message in self.messages:
            if message.is_from_user:
                content = message.content
                if len(content) > max_length:
                    return content[: max_length - 3] + "..."
                return content
        return ""

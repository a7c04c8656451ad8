"""Exception types for tool registry and session orchestration."""


class ToolhubError(Exception):
    """Base class for toolhub-server errors."""


class ProviderLoadFailure(ToolhubError):
    """A single provider could not be spawned, initialized, or listed."""

    def __init__(self, provider_name: str, reason: str):
        self.provider_name = provider_name
        self.reason = reason
        super().__init__(f"Provider '{provider_name}' failed to load: {reason}")


class ProviderProtocolError(ToolhubError):
    """A provider answered with a JSON-RPC error or a malformed message."""


class DuplicateToolName(ToolhubError):
    """Two providers exposed a tool with the same name.

    Never raised to callers; used to describe the dropped duplicate in logs.
    """

    def __init__(self, tool_name: str, kept_provider: str, dropped_provider: str):
        self.tool_name = tool_name
        self.kept_provider = kept_provider
        self.dropped_provider = dropped_provider
        super().__init__(
            f"Duplicate tool '{tool_name}' from '{dropped_provider}' dropped, "
            f"keeping the one from '{kept_provider}'"
        )


class SessionNotInitialized(ToolhubError):
    """A reasoning binding was needed but could not be created."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Chat session {session_id} is not properly initialized")


class DisconnectFailure(ToolhubError):
    """Disconnecting a provider connection failed."""

    def __init__(self, provider_name: str, reason: str):
        self.provider_name = provider_name
        self.reason = reason
        super().__init__(f"Failed to disconnect provider '{provider_name}': {reason}")


class ReasoningFailure(ToolhubError):
    """The reasoning engine could not produce a reply."""

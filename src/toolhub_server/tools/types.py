"""Data types for the tool registry."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from toolhub_server.providers.client import ProviderConnection


class LoadState(str, Enum):
    """Load state of the tool catalog."""

    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


class ToggleState(str, Enum):
    """Aggregate enabled state of all tools owned by one provider."""

    ON = "on"
    OFF = "off"
    MIXED = "mixed"


@dataclass(frozen=True)
class Tool:
    """A callable capability exposed by a provider.

    Attributes:
        name: Unique key within the catalog
        description: Human-readable description from the provider
        input_schema: JSON schema of the tool arguments
        provider: The connection hosting this tool, or None
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict, compare=False)
    provider: "ProviderConnection | None" = field(
        default=None, compare=False, repr=False
    )

    @property
    def provider_name(self) -> str | None:
        """Name of the owning provider, if any."""
        return self.provider.name if self.provider is not None else None

    def to_function_schema(self) -> dict[str, Any]:
        """Describe the tool in the function-calling format Ollama expects."""
        parameters = self.input_schema or {"type": "object", "properties": {}}
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }

"""Tool catalog, selection, and provider supervision layer.

This package keeps the deduplicated catalog of tools discovered from external
providers, the enabled-tool selection logic, and the supervisor that tears
provider connections down on shutdown.
"""

from toolhub_server.tools.registry import ToolRegistry
from toolhub_server.tools.supervisor import ToolSupervisor
from toolhub_server.tools.types import LoadState, ToggleState, Tool

__all__ = [
    "LoadState",
    "ToggleState",
    "Tool",
    "ToolRegistry",
    "ToolSupervisor",
]

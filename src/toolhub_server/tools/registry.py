"""ToolRegistry: the shared, deduplicated catalog of provider tools.

This module provides the ToolRegistry class which handles:
- Single-flight loading of tools from every configured provider
- Deduplication by tool name (first provider in discovery order wins)
- The registry-wide enabled tool selection
- Grouping and searching the catalog
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from toolhub_server.exceptions import DisconnectFailure, DuplicateToolName
from toolhub_server.notifications import (
    EVENT_TOOLS_ENABLED_CHANGED,
    EVENT_TOOLS_LOADED,
    EVENT_TOOLS_LOADING,
    ChangeNotifier,
)
from toolhub_server.tools import selection
from toolhub_server.tools.types import LoadState, Tool, ToggleState

if TYPE_CHECKING:
    from toolhub_server.providers.client import ProviderConnection
    from toolhub_server.providers.discovery import ProviderDiscovery

logger = logging.getLogger(__name__)

DEFAULT_GENERAL_BUCKET = "General"


class ToolRegistry:
    """Owns the tool catalog and its load state machine.

    State moves NOT_LOADED -> LOADING -> LOADED. While LOADING, exactly one
    load task exists and every caller of load_if_needed() awaits that same
    task. All catalog and enabled-set mutations go through this class.
    """

    def __init__(
        self,
        discovery: "ProviderDiscovery",
        notifier: ChangeNotifier | None = None,
        general_bucket_name: str = DEFAULT_GENERAL_BUCKET,
    ):
        """Initialize the ToolRegistry.

        Args:
            discovery: Collaborator that connects providers and lists their tools
            notifier: Where change events are published
            general_bucket_name: Group label for tools without a provider
        """
        self.discovery = discovery
        self.notifier = notifier or ChangeNotifier()
        self.general_bucket_name = general_bucket_name

        self._tools: list[Tool] = []
        self._state = LoadState.NOT_LOADED
        self._load_task: asyncio.Task[None] | None = None
        self._enabled_tool_names: set[str] = set()

    # --- Catalog and state ---

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is LoadState.LOADED

    @property
    def tools(self) -> list[Tool]:
        """The current catalog. Empty until a load has committed tools."""
        return list(self._tools)

    @property
    def load_task(self) -> asyncio.Task[None] | None:
        """The in-flight load task, if any."""
        return self._load_task

    def get_tool(self, name: str) -> Tool | None:
        for tool in self._tools:
            if tool.name == name:
                return tool
        return None

    def connections(self) -> list["ProviderConnection"]:
        """Distinct provider connections referenced by the catalog.

        Compared by identity, in catalog order.
        """
        seen: set[int] = set()
        connections: list["ProviderConnection"] = []
        for tool in self._tools:
            if tool.provider is not None and id(tool.provider) not in seen:
                seen.add(id(tool.provider))
                connections.append(tool.provider)
        return connections

    # --- Loading ---

    async def load_if_needed(self) -> None:
        """Load the catalog unless it is already loaded.

        Concurrent callers share a single discovery pass. If the shared load
        is cancelled (for example by shutdown) waiters return quietly; only a
        waiter that is itself being cancelled sees CancelledError.
        """
        if self._state is LoadState.LOADED:
            return

        task = self._load_task
        if task is None:
            task = self._start_load()

        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and (current is None or not current.cancelling()):
                logger.debug("Tool load was cancelled before completing")
                return
            raise

    async def reload(self) -> None:
        """Discard the catalog and load it again, even if already loaded."""
        await self.cancel_load()
        self.reset()
        await self.load_if_needed()

    async def cancel_load(self) -> bool:
        """Cancel the in-flight load, keeping whatever it already committed.

        Returns:
            True if a load was running and has been cancelled
        """
        task = self._load_task
        if task is None or task.done():
            return False

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        logger.info(f"Cancelled tool load, kept {len(self._tools)} tools")
        return True

    def reset(self) -> None:
        """Clear the catalog and return to NOT_LOADED.

        The enabled selection survives so a later load keeps user choices.
        """
        self._tools = []
        self._state = LoadState.NOT_LOADED
        self._load_task = None

    def _start_load(self) -> asyncio.Task[None]:
        self._state = LoadState.LOADING
        task = asyncio.create_task(self._load_tools(), name="tool-registry-load")
        task.add_done_callback(self._on_load_done)
        self._load_task = task
        return task

    def _on_load_done(self, task: asyncio.Task[None]) -> None:
        if self._load_task is not task:
            return
        self._load_task = None
        if task.cancelled():
            self._state = LoadState.NOT_LOADED

    async def _load_tools(self) -> None:
        logger.debug("Loading tools...")
        self.notifier.publish(EVENT_TOOLS_LOADING)

        self._tools = []
        kept: dict[str, Tool] = {}

        try:
            async for provider in self.discovery.iter_providers():
                if not self._add_tools(provider.tools, kept):
                    await self._release(provider.connection)
        except asyncio.CancelledError:
            logger.info(f"Tool load interrupted after {len(self._tools)} tools")
            raise
        except Exception as e:
            logger.error(f"Tool discovery failed: {e}", exc_info=True)

        self._state = LoadState.LOADED

        # First load selects everything unless a selection already exists
        if not self._enabled_tool_names:
            self._enabled_tool_names = selection.enable_all(self._tools)

        logger.info(f"Loaded {len(self._tools)} unique tools")
        self.notifier.publish(EVENT_TOOLS_LOADED, tool_count=len(self._tools))

    def _add_tools(self, tools: Iterable[Tool], kept: dict[str, Tool]) -> int:
        added = 0
        for tool in tools:
            existing = kept.get(tool.name)
            if existing is not None:
                duplicate = DuplicateToolName(
                    tool.name,
                    kept_provider=existing.provider_name or self.general_bucket_name,
                    dropped_provider=tool.provider_name or self.general_bucket_name,
                )
                logger.warning(str(duplicate))
                continue
            kept[tool.name] = tool
            self._tools.append(tool)
            added += 1
        return added

    async def _release(self, connection: "ProviderConnection") -> None:
        # Nothing in the catalog references it, so nothing else would close it
        logger.info(f"Provider {connection.name} contributes no tools, disconnecting it")
        try:
            await connection.disconnect()
        except Exception as e:
            logger.error(str(DisconnectFailure(connection.name, str(e))))

    # --- Views ---

    def get_effective_tools(self, enabled_names: Iterable[str] | None = None) -> list[Tool]:
        """Tools selected by ``enabled_names``; an empty selection means all."""
        return selection.filter_enabled(self._tools, enabled_names)

    def group_by_provider(self) -> dict[str, list[Tool]]:
        """Map provider name to its tools, in catalog order.

        Tools without a provider are grouped under general_bucket_name.
        """
        groups: dict[str, list[Tool]] = {}
        for tool in self._tools:
            key = tool.provider_name or self.general_bucket_name
            groups.setdefault(key, []).append(tool)
        return groups

    def search(self, query: str) -> list[Tool]:
        return selection.search_tools(self._tools, query)

    # --- Registry-wide selection ---

    @property
    def enabled_tool_names(self) -> set[str]:
        return set(self._enabled_tool_names)

    def enabled_tools(self) -> list[Tool]:
        return self.get_effective_tools(self._enabled_tool_names)

    def set_enabled_tool_names(self, names: Iterable[str]) -> None:
        self._apply_selection(set(names))

    def set_tool_enabled(self, name: str, enabled: bool) -> None:
        self._apply_selection(
            selection.set_enabled(self._enabled_tool_names, name, enabled)
        )

    def enable_all_tools(self) -> None:
        self._apply_selection(selection.enable_all(self._tools))

    def disable_all_tools(self) -> None:
        self._apply_selection(selection.disable_all())

    def enable_provider(self, provider_name: str) -> None:
        self._apply_selection(
            selection.enable_provider(
                self._enabled_tool_names, self._tools, provider_name
            )
        )

    def disable_provider(self, provider_name: str) -> None:
        self._apply_selection(
            selection.disable_provider(
                self._enabled_tool_names, self._tools, provider_name
            )
        )

    def all_enabled_for_provider(self, provider_name: str) -> bool:
        return selection.all_enabled_for_provider(
            self._enabled_tool_names, self._tools, provider_name
        )

    def any_enabled_for_provider(self, provider_name: str) -> bool:
        return selection.any_enabled_for_provider(
            self._enabled_tool_names, self._tools, provider_name
        )

    def provider_toggle_state(self, provider_name: str) -> ToggleState:
        return selection.provider_toggle_state(
            self._enabled_tool_names, self._tools, provider_name
        )

    def _apply_selection(self, names: set[str]) -> None:
        if names == self._enabled_tool_names:
            return
        self._enabled_tool_names = names
        logger.debug(f"Enabled tool selection now has {len(names)} names")
        self.notifier.publish(
            EVENT_TOOLS_ENABLED_CHANGED, enabled_tool_names=sorted(names)
        )

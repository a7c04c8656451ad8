"""Tools router for the shared tool catalog.

This module provides REST API endpoints for:
- Listing and searching the catalog
- Grouping tools by provider with a tri-state toggle
- Changing the global enabled tool selection
- Reloading the catalog from the configured providers
- Streaming catalog and session change events over SSE
"""

import asyncio
import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sse_starlette.sse import EventSourceResponse

from toolhub_server.dependencies import (
    get_notifier,
    get_orchestrator,
    get_tool_registry,
    get_tool_supervisor,
)
from toolhub_server.models.tools import (
    EnabledToolsResponse,
    SetToolEnabledRequest,
    ToolGroupResponse,
    ToolGroupsResponse,
    ToolListResponse,
    ToolResponse,
)
from toolhub_server.notifications import ChangeNotifier
from toolhub_server.sessions import SessionOrchestrator
from toolhub_server.tools import Tool, ToolRegistry, ToolSupervisor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])

# Seconds between keep-alive pings on the event stream
EVENT_STREAM_PING = 15


def _tool_response(tool: Tool, enabled_names: set[str]) -> ToolResponse:
    return ToolResponse(
        name=tool.name,
        description=tool.description,
        provider=tool.provider_name,
        enabled=tool.name in enabled_names,
    )


def _enabled_response(registry: ToolRegistry) -> EnabledToolsResponse:
    return EnabledToolsResponse(enabled_tool_names=sorted(registry.enabled_tool_names))


@router.get("", response_model=ToolListResponse, summary="List the tool catalog")
async def list_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    q: str = "",
) -> ToolListResponse:
    """List the catalog, optionally narrowed by a free-text query.

    Waits for the catalog to finish loading. The query matches tool name,
    description or provider name, case-insensitively.

    Args:
        registry: Injected ToolRegistry
        q: Optional search text

    Returns:
        Matching tools with their global enabled flag
    """
    await registry.load_if_needed()

    enabled_names = registry.enabled_tool_names
    matches = registry.search(q)

    return ToolListResponse(
        state=registry.state.value,
        tools=[_tool_response(tool, enabled_names) for tool in matches],
        total=len(registry.tools),
        enabled_count=len(registry.enabled_tools()),
    )


@router.get(
    "/groups", response_model=ToolGroupsResponse, summary="Group tools by provider"
)
async def list_tool_groups(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> ToolGroupsResponse:
    """List the catalog grouped by owning provider.

    Each group carries an on/off/mixed toggle state for the global selection.

    Args:
        registry: Injected ToolRegistry

    Returns:
        Provider groups in catalog order
    """
    await registry.load_if_needed()

    enabled_names = registry.enabled_tool_names
    groups = [
        ToolGroupResponse(
            provider=provider,
            toggle_state=registry.provider_toggle_state(provider).value,
            tools=[_tool_response(tool, enabled_names) for tool in group],
        )
        for provider, group in registry.group_by_provider().items()
    ]
    return ToolGroupsResponse(groups=groups)


@router.post("/reload", response_model=ToolListResponse, summary="Reload the catalog")
async def reload_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    supervisor: Annotated[ToolSupervisor, Depends(get_tool_supervisor)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> ToolListResponse:
    """Disconnect every provider, discover them again, and rebind sessions.

    Args:
        registry: Injected ToolRegistry
        supervisor: Injected ToolSupervisor
        orchestrator: Injected SessionOrchestrator

    Returns:
        The freshly loaded catalog
    """
    await supervisor.reload()
    await orchestrator.reinitialize_all()
    return await list_tools(registry)


@router.get(
    "/enabled", response_model=EnabledToolsResponse, summary="Get global selection"
)
async def get_enabled_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> EnabledToolsResponse:
    """Return the global enabled tool names."""
    return _enabled_response(registry)


@router.put(
    "/{tool_name}/enabled",
    response_model=EnabledToolsResponse,
    summary="Enable or disable one tool globally",
)
async def set_tool_enabled(
    tool_name: str,
    request: SetToolEnabledRequest,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> EnabledToolsResponse:
    """Toggle one tool in the global selection and rebind sessions.

    Raises:
        HTTPException: 404 if the tool is not in the catalog
    """
    await registry.load_if_needed()

    if registry.get_tool(tool_name) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tool '{tool_name}' not found",
        )

    registry.set_tool_enabled(tool_name, request.enabled)
    await orchestrator.reinitialize_all()
    return _enabled_response(registry)


@router.post(
    "/enable-all", response_model=EnabledToolsResponse, summary="Enable every tool"
)
async def enable_all_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> EnabledToolsResponse:
    await registry.load_if_needed()
    registry.enable_all_tools()
    await orchestrator.reinitialize_all()
    return _enabled_response(registry)


@router.post(
    "/disable-all",
    response_model=EnabledToolsResponse,
    summary="Clear the global selection",
)
async def disable_all_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> EnabledToolsResponse:
    """Clear the global selection.

    An empty selection means "no filter", so sessions that follow the
    global selection see every tool afterwards.
    """
    registry.disable_all_tools()
    await orchestrator.reinitialize_all()
    return _enabled_response(registry)


@router.post(
    "/providers/{provider_name}/{action}",
    response_model=EnabledToolsResponse,
    summary="Enable or disable every tool of a provider",
)
async def toggle_provider(
    provider_name: str,
    action: str,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> EnabledToolsResponse:
    """Enable or disable all tools owned by one provider.

    Raises:
        HTTPException: 400 for an unknown action, 404 for an unknown provider
    """
    if action not in ("enable", "disable"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown action '{action}', expected enable or disable",
        )

    await registry.load_if_needed()

    if provider_name not in registry.group_by_provider():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Provider '{provider_name}' has no tools in the catalog",
        )

    if action == "enable":
        registry.enable_provider(provider_name)
    else:
        registry.disable_provider(provider_name)

    await orchestrator.reinitialize_all()
    return _enabled_response(registry)


@router.get("/events", summary="Stream change events")
async def stream_events(
    request: Request,
    notifier: Annotated[ChangeNotifier, Depends(get_notifier)],
) -> EventSourceResponse:
    """Stream registry and session change events as Server-Sent Events.

    Each SSE event is named after the change (for example ``tools.loaded``)
    and carries the event payload as JSON.
    """
    queue = notifier.subscribe()

    async def event_generator():
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue
                yield {"event": event["event"], "data": json.dumps(event)}
        finally:
            notifier.unsubscribe(queue)
            logger.debug("Event stream subscriber left")

    return EventSourceResponse(event_generator(), ping=EVENT_STREAM_PING)

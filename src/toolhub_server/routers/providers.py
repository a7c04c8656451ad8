"""Providers router for tool provider configuration.

This module provides REST API endpoints for:
- Listing configured providers with their live status
- Adding a provider (then reloading the catalog)
- Removing a provider (then reloading the catalog)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from toolhub_server.dependencies import (
    get_orchestrator,
    get_provider_config_store,
    get_tool_registry,
    get_tool_supervisor,
)
from toolhub_server.models.providers import (
    AddProviderRequest,
    ProviderListResponse,
    ProviderResponse,
)
from toolhub_server.providers import ProviderConfig, ProviderConfigStore
from toolhub_server.sessions import SessionOrchestrator
from toolhub_server.tools import ToolRegistry, ToolSupervisor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/providers", tags=["providers"])


def _list_providers(
    store: ProviderConfigStore, registry: ToolRegistry
) -> ProviderListResponse:
    try:
        configs = store.load()
    except ValueError as e:
        logger.error(f"Failed to read provider configs: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    live = {connection.name: connection for connection in registry.connections()}
    groups = registry.group_by_provider()

    providers = []
    for name, config in configs.items():
        connection = live.get(name)
        providers.append(
            ProviderResponse(
                name=name,
                command=config.command,
                args=config.args,
                env=config.env,
                connected=connection is not None and connection.is_connected,
                tool_count=len(groups.get(name, [])),
            )
        )
    return ProviderListResponse(providers=providers)


async def _reload(supervisor: ToolSupervisor, orchestrator: SessionOrchestrator) -> None:
    await supervisor.reload()
    await orchestrator.reinitialize_all()


@router.get("", response_model=ProviderListResponse, summary="List providers")
async def list_providers(
    store: Annotated[ProviderConfigStore, Depends(get_provider_config_store)],
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> ProviderListResponse:
    """List configured providers in discovery order."""
    return _list_providers(store, registry)


@router.post(
    "",
    response_model=ProviderListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a provider",
)
async def add_provider(
    request: AddProviderRequest,
    store: Annotated[ProviderConfigStore, Depends(get_provider_config_store)],
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    supervisor: Annotated[ToolSupervisor, Depends(get_tool_supervisor)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> ProviderListResponse:
    """Add or replace a provider and reload the catalog so its tools appear.

    Raises:
        HTTPException: 400 if the configuration is invalid
    """
    try:
        store.add(
            request.name,
            ProviderConfig(command=request.command, args=request.args, env=request.env),
        )
    except ValueError as e:
        logger.warning(f"Adding provider failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await _reload(supervisor, orchestrator)
    logger.info(f"Added provider: {request.name}")
    return _list_providers(store, registry)


@router.delete(
    "/{provider_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a provider",
)
async def remove_provider(
    provider_name: str,
    store: Annotated[ProviderConfigStore, Depends(get_provider_config_store)],
    supervisor: Annotated[ToolSupervisor, Depends(get_tool_supervisor)],
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> None:
    """Remove a provider and reload the catalog so its tools disappear.

    Raises:
        HTTPException: 404 if no such provider is configured
    """
    try:
        removed = store.remove(provider_name)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )

    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Provider '{provider_name}' not found",
        )

    await _reload(supervisor, orchestrator)
    logger.info(f"Removed provider: {provider_name}")

"""Sessions router for chat session CRUD operations.

This module provides REST API endpoints for:
- Creating new sessions
- Listing all sessions
- Retrieving session details
- Deleting and clearing sessions
- Getting session messages
- Replacing a session's tool selection
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from toolhub_server.dependencies import get_orchestrator
from toolhub_server.models.sessions import (
    CreateSessionRequest,
    MessageResponse,
    MessagesResponse,
    SessionDetailResponse,
    SessionListItem,
    SessionListResponse,
    SessionResponse,
    UpdateSessionToolsRequest,
)
from toolhub_server.sessions import (
    ChatSession,
    Message,
    SessionConfig,
    SessionOrchestrator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


def message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        message_id=message.message_id,
        role=message.role,
        content=message.content,
        is_from_user=message.is_from_user,
        timestamp=message.timestamp,
    )


def _session_response(session: ChatSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        title=session.title,
        system_instructions=session.system_instructions,
        temperature=session.temperature,
        max_response_tokens=session.max_response_tokens,
        enabled_tool_names=(
            sorted(session.enabled_tool_names)
            if session.enabled_tool_names is not None
            else None
        ),
        active_tools=[tool.name for tool in session.tools],
        initialized=session.is_initialized,
        created_at=session.created_at,
        updated_at=session.updated_at,
        message_count=len(session.messages),
    )


def _require_session(orchestrator: SessionOrchestrator, session_id: str) -> ChatSession:
    session = orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return session


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session",
)
async def create_session(
    request: CreateSessionRequest,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    """Create a new chat session.

    The session is returned immediately; its reasoning binding is built in
    the background once the tool catalog is available.

    Args:
        request: Session creation parameters
        orchestrator: Injected SessionOrchestrator

    Returns:
        Created session metadata
    """
    config = SessionConfig(
        system_instructions=request.system_instructions,
        temperature=request.temperature,
        max_response_tokens=request.max_response_tokens,
        enabled_tool_names=(
            set(request.enabled_tool_names)
            if request.enabled_tool_names is not None
            else None
        ),
        title=request.title,
    )
    session = orchestrator.create_session(config)
    return _session_response(session)


@router.get("", response_model=SessionListResponse, summary="List all sessions")
async def list_sessions(
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> SessionListResponse:
    """List all chat sessions in creation order."""
    items = [
        SessionListItem(
            session_id=session.session_id,
            title=session.title,
            created_at=session.created_at,
            updated_at=session.updated_at,
            message_count=len(session.messages),
            preview=session.get_preview(),
        )
        for session in orchestrator.list_sessions()
    ]
    logger.debug(f"Listed {len(items)} sessions")
    return SessionListResponse(sessions=items)


@router.get(
    "/{session_id}",
    response_model=SessionDetailResponse,
    summary="Get session details",
)
async def get_session(
    session_id: str,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> SessionDetailResponse:
    """Get a session with its full message history.

    Raises:
        HTTPException: 404 if session doesn't exist
    """
    session = _require_session(orchestrator, session_id)
    return SessionDetailResponse(
        **_session_response(session).model_dump(),
        messages=[message_response(message) for message in session.messages],
    )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a session",
)
async def delete_session(
    session_id: str,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> None:
    """Delete a session. No replacement session is created.

    Raises:
        HTTPException: 404 if session doesn't exist
    """
    if not orchestrator.delete_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )


@router.post(
    "/{session_id}/clear",
    response_model=SessionResponse,
    summary="Clear session messages",
)
async def clear_session(
    session_id: str,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    """Remove every message from a session, keeping its settings.

    Raises:
        HTTPException: 404 if session doesn't exist
    """
    session = _require_session(orchestrator, session_id)
    orchestrator.clear_session(session_id)
    return _session_response(session)


@router.get(
    "/{session_id}/messages",
    response_model=MessagesResponse,
    summary="Get session messages",
)
async def get_messages(
    session_id: str,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> MessagesResponse:
    """Get all messages of a session in order.

    Raises:
        HTTPException: 404 if session doesn't exist
    """
    session = _require_session(orchestrator, session_id)
    return MessagesResponse(
        messages=[message_response(message) for message in session.messages]
    )


@router.put(
    "/{session_id}/tools",
    response_model=SessionResponse,
    summary="Replace the session's tool selection",
)
async def update_session_tools(
    session_id: str,
    request: UpdateSessionToolsRequest,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    """Set the session's enabled tools and rebuild its reasoning binding.

    Raises:
        HTTPException: 404 if session doesn't exist
    """
    session = _require_session(orchestrator, session_id)
    await orchestrator.update_session_tools(session_id, request.enabled_tool_names)
    logger.info(f"Updated tools for session {session_id}")
    return _session_response(session)

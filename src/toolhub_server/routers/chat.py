"""Chat API endpoints.

This module provides the endpoint for sending a message to a session and
receiving the reply.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from toolhub_server.dependencies import get_orchestrator
from toolhub_server.models.chat import ChatRequest, ChatResponse
from toolhub_server.routers.sessions import message_response
from toolhub_server.sessions import SessionOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.post("/{session_id}", response_model=ChatResponse)
async def send_message(
    session_id: str,
    request_body: ChatRequest,
    orchestrator: Annotated[SessionOrchestrator, Depends(get_orchestrator)],
) -> ChatResponse:
    """Send a message to a session and receive the reply.

    Model or tool failures do not fail the request: the reply is then the
    apology message that was recorded in the session history.

    Args:
        session_id: The session ID to chat with
        request_body: Chat request containing the message
        orchestrator: Injected SessionOrchestrator

    Returns:
        ChatResponse with the recorded user message and the reply

    Raises:
        HTTPException: 404 if session not found
    """
    session = orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail={
                "error": {
                    "code": "session_not_found",
                    "message": f"Session {session_id} not found",
                    "details": {"session_id": session_id},
                }
            },
        )

    # send_message records the user message at this index before it awaits
    user_index = len(session.messages)
    reply = await orchestrator.send_message(session_id, request_body.message)
    messages = session.messages
    user_message = None
    if user_index < len(messages) and messages[user_index].is_from_user:
        user_message = messages[user_index]
    logger.info(f"Reply recorded for session {session_id}")

    return ChatResponse(
        session_id=session_id,
        title=session.title,
        user_message=(
            message_response(user_message) if user_message is not None else None
        ),
        reply=message_response(reply),
    )

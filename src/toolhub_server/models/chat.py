"""Pydantic models for chat API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field

from toolhub_server.models.sessions import MessageResponse


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat/{session_id}."""

    message: str = Field(..., min_length=1, description="The user message to send")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"message": "What is the capital of France?"}]
        }
    )


class ChatResponse(BaseModel):
    """Response body for the chat endpoint.

    ``reply`` is either the model's answer or the fixed apology message when
    generation failed; the endpoint itself does not fail on model errors.
    """

    session_id: str = Field(description="Session identifier")
    title: str = Field(description="Session title after this message")
    user_message: MessageResponse | None = Field(
        default=None,
        description="The recorded user message, if the history was not cleared meanwhile",
    )
    reply: MessageResponse = Field(description="The assistant's reply")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "a1b2c3d4e5",
                "title": "What is the capital...",
                "user_message": {
                    "message_id": "0a1b2c3d4e",
                    "role": "user",
                    "content": "What is the capital of France?",
                    "is_from_user": True,
                    "timestamp": "2025-01-15T10:35:00.000000Z",
                },
                "reply": {
                    "message_id": "f1e2d3c4b5",
                    "role": "assistant",
                    "content": "The capital of France is Paris.",
                    "is_from_user": False,
                    "timestamp": "2025-01-15T10:35:02.000000Z",
                },
            }
        }
    )

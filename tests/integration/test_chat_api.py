"""Integration tests for the chat endpoint.

Tests POST /api/v1/chat/{session_id} with a full app setup, including tool
calls routed to providers and graceful failure handling.
"""

import pytest
from httpx import AsyncClient

from toolhub_server.sessions import APOLOGY_MESSAGE


async def new_session(client: AsyncClient, **body) -> str:
    response = await client.post("/api/v1/sessions", json=body)
    assert response.status_code == 201
    return response.json()["session_id"]


class TestChat:
    """Tests for POST /api/v1/chat/{session_id}."""

    @pytest.mark.asyncio
    async def test_chat_returns_reply(self, async_client: AsyncClient):
        session_id = await new_session(async_client)

        response = await async_client.post(
            f"/api/v1/chat/{session_id}",
            json={"message": "What is the capital of France?"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == session_id
        assert data["title"] == "What is the capital..."
        assert data["user_message"]["content"] == "What is the capital of France?"
        assert data["user_message"]["role"] == "user"
        assert data["reply"]["content"] == "Hello from the model"
        assert data["reply"]["role"] == "assistant"

    @pytest.mark.asyncio
    async def test_chat_streams_chunks_into_one_reply(
        self, async_client: AsyncClient, mock_ollama_client
    ):
        chunks = [
            {"message": {"role": "assistant", "content": "The"}, "done": False},
            {"message": {"role": "assistant", "content": " capital"}, "done": False},
            {"message": {"role": "assistant", "content": " is Paris."}, "done": False},
            {"message": {"role": "assistant", "content": ""}, "done": True},
        ]

        async def mock_stream(*args, **kwargs):
            for chunk in chunks:
                yield chunk

        mock_ollama_client.chat_stream = mock_stream
        session_id = await new_session(async_client)

        response = await async_client.post(
            f"/api/v1/chat/{session_id}", json={"message": "Capital of France?"}
        )

        assert response.json()["reply"]["content"] == "The capital is Paris."

    @pytest.mark.asyncio
    async def test_chat_runs_tool_calls(
        self, async_client: AsyncClient, mock_ollama_client, provider_connections
    ):
        seen_tools = []
        turns = [
            [
                {
                    "message": {
                        "role": "assistant",
                        "content": "",
                        "tool_calls": [
                            {"function": {"name": "fetch", "arguments": {"url": "https://example.com"}}}
                        ],
                    },
                    "done": True,
                }
            ],
            [{"message": {"role": "assistant", "content": "Fetched it."}, "done": True}],
        ]

        async def mock_stream(*args, **kwargs):
            seen_tools.append([schema["function"]["name"] for schema in kwargs["tools"]])
            for chunk in turns.pop(0):
                yield chunk

        mock_ollama_client.chat_stream = mock_stream
        session_id = await new_session(async_client, enabled_tool_names=["fetch"])

        response = await async_client.post(
            f"/api/v1/chat/{session_id}", json={"message": "Get example.com"}
        )

        assert response.json()["reply"]["content"] == "Fetched it."
        web = provider_connections[1]
        assert web.calls == [("fetch", {"url": "https://example.com"})]
        assert seen_tools == [["fetch"], ["fetch"]]

    @pytest.mark.asyncio
    async def test_model_failure_returns_apology(
        self, async_client: AsyncClient, mock_ollama_client
    ):
        async def failing_stream(*args, **kwargs):
            raise ConnectionError("Ollama is down")
            yield  # pragma: no cover

        mock_ollama_client.chat_stream = failing_stream
        session_id = await new_session(async_client)

        response = await async_client.post(
            f"/api/v1/chat/{session_id}", json={"message": "Hello"}
        )

        assert response.status_code == 200
        assert response.json()["reply"]["content"] == APOLOGY_MESSAGE

        messages = (await async_client.get(f"/api/v1/sessions/{session_id}/messages")).json()
        assert [m["content"] for m in messages["messages"]] == ["Hello", APOLOGY_MESSAGE]

    @pytest.mark.asyncio
    async def test_conversation_continues_after_failure(
        self, async_client: AsyncClient, mock_ollama_client
    ):
        calls = []

        async def flaky_stream(*args, **kwargs):
            calls.append(kwargs["messages"])
            if len(calls) == 1:
                raise ConnectionError("Ollama is down")
            yield {"message": {"role": "assistant", "content": "Back online"}, "done": True}

        mock_ollama_client.chat_stream = flaky_stream
        session_id = await new_session(async_client)

        await async_client.post(f"/api/v1/chat/{session_id}", json={"message": "First"})
        response = await async_client.post(
            f"/api/v1/chat/{session_id}", json={"message": "Second"}
        )

        assert response.json()["reply"]["content"] == "Back online"
        # The failed turn left nothing behind in the model transcript
        assert [m["content"] for m in calls[1] if m["role"] == "user"] == ["Second"]

    @pytest.mark.asyncio
    async def test_chat_unknown_session(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/chat/nonexistent", json={"message": "Hello"}
        )

        assert response.status_code == 404
        assert response.json()["detail"]["error"]["code"] == "session_not_found"

    @pytest.mark.asyncio
    async def test_chat_rejects_empty_message(self, async_client: AsyncClient):
        session_id = await new_session(async_client)

        response = await async_client.post(f"/api/v1/chat/{session_id}", json={"message": ""})

        assert response.status_code == 422

"""Integration tests for session API endpoints.

Tests session CRUD and tool-selection endpoints with a full app setup.
"""

import pytest
from httpx import AsyncClient


async def create_session(client: AsyncClient, **body) -> dict:
    response = await client.post("/api/v1/sessions", json=body)
    assert response.status_code == 201
    return response.json()


class TestCreateSession:
    """Tests for POST /api/v1/sessions."""

    @pytest.mark.asyncio
    async def test_create_with_defaults(self, async_client: AsyncClient):
        data = await create_session(async_client)

        assert len(data["session_id"]) == 10
        assert data["title"] == "New Chat"
        assert data["system_instructions"] == "You are a helpful assistant."
        assert data["temperature"] == 0.7
        assert data["max_response_tokens"] is None
        assert data["enabled_tool_names"] is None
        assert data["message_count"] == 0

    @pytest.mark.asyncio
    async def test_create_with_options(self, async_client: AsyncClient, test_app):
        data = await create_session(
            async_client,
            system_instructions="Only answer in haiku.",
            temperature=1.2,
            max_response_tokens=128,
            enabled_tool_names=["fetch"],
            title="Poetry",
        )
        await test_app.state.orchestrator.wait_until_initialized(data["session_id"])

        detail = (await async_client.get(f"/api/v1/sessions/{data['session_id']}")).json()
        assert detail["title"] == "Poetry"
        assert detail["system_instructions"] == "Only answer in haiku."
        assert detail["temperature"] == 1.2
        assert detail["max_response_tokens"] == 128
        assert detail["enabled_tool_names"] == ["fetch"]
        assert detail["active_tools"] == ["fetch"]
        assert detail["initialized"] is True

    @pytest.mark.asyncio
    async def test_new_session_follows_global_selection(
        self, async_client: AsyncClient, test_app
    ):
        await async_client.put("/api/v1/tools/fetch/enabled", json={"enabled": False})

        data = await create_session(async_client)
        await test_app.state.orchestrator.wait_until_initialized(data["session_id"])

        detail = (await async_client.get(f"/api/v1/sessions/{data['session_id']}")).json()
        assert detail["enabled_tool_names"] is None
        assert detail["active_tools"] == ["read_file", "write_file"]

        await async_client.put("/api/v1/tools/fetch/enabled", json={"enabled": True})

        detail = (await async_client.get(f"/api/v1/sessions/{data['session_id']}")).json()
        assert detail["active_tools"] == ["read_file", "write_file", "fetch"]

    @pytest.mark.asyncio
    async def test_create_rejects_bad_temperature(self, async_client: AsyncClient):
        response = await async_client.post("/api/v1/sessions", json={"temperature": 5.0})

        assert response.status_code == 422


class TestReadSessions:
    """Tests for listing and retrieving sessions."""

    @pytest.mark.asyncio
    async def test_list_sessions(self, async_client: AsyncClient):
        first = await create_session(async_client)
        second = await create_session(async_client)

        response = await async_client.get("/api/v1/sessions")

        assert response.status_code == 200
        ids = [item["session_id"] for item in response.json()["sessions"]]
        assert ids == [first["session_id"], second["session_id"]]

    @pytest.mark.asyncio
    async def test_list_sessions_empty(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/sessions")

        assert response.json() == {"sessions": []}

    @pytest.mark.asyncio
    async def test_get_session_with_messages(self, async_client: AsyncClient):
        session_id = (await create_session(async_client))["session_id"]
        await async_client.post(f"/api/v1/chat/{session_id}", json={"message": "Hi there"})

        response = await async_client.get(f"/api/v1/sessions/{session_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["message_count"] == 2
        assert [m["role"] for m in data["messages"]] == ["user", "assistant"]

        listing = (await async_client.get("/api/v1/sessions")).json()
        assert listing["sessions"][0]["preview"] == "Hi there"

    @pytest.mark.asyncio
    async def test_get_messages(self, async_client: AsyncClient):
        session_id = (await create_session(async_client))["session_id"]
        await async_client.post(f"/api/v1/chat/{session_id}", json={"message": "Hi"})

        response = await async_client.get(f"/api/v1/sessions/{session_id}/messages")

        assert response.status_code == 200
        messages = response.json()["messages"]
        assert [m["content"] for m in messages] == ["Hi", "Hello from the model"]
        assert messages[0]["is_from_user"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("suffix", ["", "/messages"])
    async def test_unknown_session_is_404(self, async_client: AsyncClient, suffix):
        response = await async_client.get(f"/api/v1/sessions/nonexistent{suffix}")

        assert response.status_code == 404


class TestModifySessions:
    """Tests for delete, clear and tool selection updates."""

    @pytest.mark.asyncio
    async def test_delete_session(self, async_client: AsyncClient):
        session_id = (await create_session(async_client))["session_id"]

        response = await async_client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 204

        assert (await async_client.get(f"/api/v1/sessions/{session_id}")).status_code == 404
        assert (await async_client.get("/api/v1/sessions")).json()["sessions"] == []

    @pytest.mark.asyncio
    async def test_delete_unknown_session(self, async_client: AsyncClient):
        response = await async_client.delete("/api/v1/sessions/nonexistent")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_clear_session(self, async_client: AsyncClient):
        session_id = (await create_session(async_client))["session_id"]
        await async_client.post(f"/api/v1/chat/{session_id}", json={"message": "Hi"})

        response = await async_client.post(f"/api/v1/sessions/{session_id}/clear")

        assert response.status_code == 200
        assert response.json()["message_count"] == 0
        assert response.json()["title"] == "Hi"

    @pytest.mark.asyncio
    async def test_update_session_tools(self, async_client: AsyncClient):
        session_id = (await create_session(async_client))["session_id"]

        response = await async_client.put(
            f"/api/v1/sessions/{session_id}/tools",
            json={"enabled_tool_names": ["read_file", "ghost_tool"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["enabled_tool_names"] == ["ghost_tool", "read_file"]
        # Names missing from the catalog simply match nothing
        assert data["active_tools"] == ["read_file"]
        assert data["initialized"] is True

    @pytest.mark.asyncio
    async def test_update_session_tools_empty_means_all(self, async_client: AsyncClient):
        session_id = (await create_session(async_client, enabled_tool_names=["fetch"]))[
            "session_id"
        ]

        response = await async_client.put(
            f"/api/v1/sessions/{session_id}/tools", json={"enabled_tool_names": []}
        )

        assert response.json()["active_tools"] == ["read_file", "write_file", "fetch"]

    @pytest.mark.asyncio
    async def test_update_tools_unknown_session(self, async_client: AsyncClient):
        response = await async_client.put(
            "/api/v1/sessions/nonexistent/tools", json={"enabled_tool_names": []}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_global_change_keeps_session_override(self, async_client: AsyncClient):
        """A session with its own selection is rebound but keeps that selection."""
        session_id = (await create_session(async_client, enabled_tool_names=["fetch"]))[
            "session_id"
        ]

        await async_client.post("/api/v1/tools/providers/web/disable")

        detail = (await async_client.get(f"/api/v1/sessions/{session_id}")).json()
        assert detail["enabled_tool_names"] == ["fetch"]
        assert detail["active_tools"] == ["fetch"]

    @pytest.mark.asyncio
    async def test_null_selection_returns_to_global(self, async_client: AsyncClient):
        session_id = (await create_session(async_client, enabled_tool_names=["fetch"]))[
            "session_id"
        ]
        await async_client.put("/api/v1/tools/read_file/enabled", json={"enabled": False})

        response = await async_client.put(
            f"/api/v1/sessions/{session_id}/tools", json={"enabled_tool_names": None}
        )

        data = response.json()
        assert data["enabled_tool_names"] is None
        assert data["active_tools"] == ["write_file", "fetch"]

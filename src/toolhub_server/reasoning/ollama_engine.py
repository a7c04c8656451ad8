"""Ollama-backed reasoning engine.

Each OllamaReasoningSession keeps its own transcript, offers its tools to the
model as function schemas, and runs the tool calls the model asks for through
the provider connection that owns each tool.
"""

import json
import logging
from typing import Any

from toolhub_server.exceptions import ProviderProtocolError, ReasoningFailure
from toolhub_server.ollama.client import OllamaClient
from toolhub_server.reasoning.base import ReasoningEngine, ReasoningSession
from toolhub_server.tools.types import Tool

logger = logging.getLogger(__name__)


class OllamaReasoningSession(ReasoningSession):
    """Conversation state for one session, answered by an Ollama model."""

    def __init__(
        self,
        client: OllamaClient,
        model: str,
        instructions: str,
        temperature: float,
        max_response_tokens: int | None,
        tools: list[Tool],
        max_tool_rounds: int = 8,
    ):
        super().__init__(instructions, temperature, max_response_tokens, tools)
        self.client = client
        self.model = model
        self.max_tool_rounds = max_tool_rounds
        self._tools_by_name = {tool.name: tool for tool in self.tools}
        self.transcript: list[dict[str, Any]] = []
        if instructions:
            self.transcript.append({"role": "system", "content": instructions})

    @property
    def options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"temperature": self.temperature}
        if self.max_response_tokens is not None:
            options["num_predict"] = self.max_response_tokens
        return options

    async def respond(self, user_input: str) -> str:
        """Ask the model for a reply, running tool calls until it answers.

        The transcript is only extended when a reply is produced, so a
        failed turn leaves the conversation as it was.

        Raises:
            ReasoningFailure: If the model keeps calling tools past max_tool_rounds
            Exception: If the Ollama request fails
        """
        messages = self.transcript + [{"role": "user", "content": user_input}]
        schemas = [tool.to_function_schema() for tool in self.tools]

        for _ in range(self.max_tool_rounds + 1):
            content, tool_calls = await self._complete(messages, schemas)

            if not tool_calls:
                messages.append({"role": "assistant", "content": content})
                self.transcript = messages
                return content

            messages.append(
                {"role": "assistant", "content": content, "tool_calls": tool_calls}
            )
            for call in tool_calls:
                function = call.get("function", {})
                name = function.get("name", "")
                result = await self._run_tool(name, function.get("arguments") or {})
                messages.append({"role": "tool", "content": result, "tool_name": name})

        raise ReasoningFailure(
            f"Model did not answer within {self.max_tool_rounds} tool rounds"
        )

    async def _complete(
        self, messages: list[dict[str, Any]], schemas: list[dict[str, Any]]
    ) -> tuple[str, list[dict[str, Any]]]:
        content_parts: list[str] = []
        tool_calls: list[dict[str, Any]] = []

        async for chunk in self.client.chat_stream(
            model=self.model,
            messages=messages,
            tools=schemas,
            options=self.options,
        ):
            message = chunk.get("message") or {}
            if message.get("content"):
                content_parts.append(message["content"])
            if message.get("tool_calls"):
                tool_calls.extend(message["tool_calls"])

        return "".join(content_parts), tool_calls

    async def _run_tool(self, name: str, arguments: Any) -> str:
        tool = self._tools_by_name.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return f"Error: tool '{name}' is not available"
        if tool.provider is None:
            return f"Error: tool '{name}' has no provider"

        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError:
                return f"Error: invalid arguments for tool '{name}'"

        logger.debug(f"Calling tool {name} on provider {tool.provider.name}")
        try:
            return await tool.provider.call_tool(name, arguments)
        except ProviderProtocolError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return f"Error: {e}"


class OllamaReasoningEngine(ReasoningEngine):
    """Creates OllamaReasoningSession bindings sharing one OllamaClient."""

    def __init__(self, client: OllamaClient, model: str, max_tool_rounds: int = 8):
        self.client = client
        self.model = model
        self.max_tool_rounds = max_tool_rounds

    def create_session(
        self,
        instructions: str,
        temperature: float,
        max_response_tokens: int | None,
        tools: list[Tool],
    ) -> OllamaReasoningSession:
        return OllamaReasoningSession(
            client=self.client,
            model=self.model,
            instructions=instructions,
            temperature=temperature,
            max_response_tokens=max_response_tokens,
            tools=tools,
            max_tool_rounds=self.max_tool_rounds,
        )

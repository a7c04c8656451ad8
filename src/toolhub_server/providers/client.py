"""Live connection to a single tool provider process.

This module provides the ProviderConnection class which handles:
- Spawning the provider subprocess
- The initialize handshake
- Listing and calling tools
- Tearing the process down exactly once
"""

import asyncio
import logging
import os
from typing import Any

from toolhub_server.exceptions import ProviderLoadFailure, ProviderProtocolError
from toolhub_server.providers import protocol
from toolhub_server.providers.config_store import ProviderConfig
from toolhub_server.tools.types import Tool

logger = logging.getLogger(__name__)

# Seconds to wait for a provider to exit after its stdin is closed
SHUTDOWN_GRACE_PERIOD = 5.0


class ProviderConnection:
    """A spawned provider reachable over stdio JSON-RPC.

    Several Tool values share one connection; the connection is compared by
    identity, never by name.
    """

    def __init__(
        self,
        name: str,
        config: ProviderConfig,
        request_timeout: float | None = 30.0,
    ):
        """Initialize a ProviderConnection.

        Args:
            name: Provider name from the config store
            config: Launch configuration
            request_timeout: Seconds to wait for each response, None to wait forever
        """
        self.name = name
        self.config = config
        self.request_timeout = request_timeout
        self.server_info: dict[str, Any] = {}

        self._process: asyncio.subprocess.Process | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._next_id = 0
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return (
            self._process is not None
            and self._process.returncode is None
            and not self._closed
        )

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def connect(self) -> None:
        """Spawn the provider and run the initialize handshake.

        Raises:
            ProviderLoadFailure: If the process cannot be started or initialized
        """
        if self._closed:
            raise ProviderLoadFailure(self.name, "connection already closed")

        env = None
        if self.config.env:
            env = os.environ.copy()
            env.update(self.config.env)

        try:
            self._process = await asyncio.create_subprocess_exec(
                self.config.command,
                *self.config.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env=env,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ProviderLoadFailure(self.name, f"cannot start process: {e}")

        logger.debug(f"Started provider {self.name} with PID {self._process.pid}")
        self._reader_task = asyncio.create_task(
            self._read_loop(self._process.stdout),
            name=f"provider-reader-{self.name}",
        )

        try:
            result = await self._request("initialize", protocol.initialize_params())
            await self._notify("notifications/initialized")
        except ProviderProtocolError as e:
            await self.disconnect()
            raise ProviderLoadFailure(self.name, str(e))

        self.server_info = result.get("serverInfo", {})
        logger.info(
            f"Connected to provider {self.name} "
            f"({self.server_info.get('name', 'unknown')} "
            f"{self.server_info.get('version', '')})".rstrip()
        )

    async def list_tools(self) -> list[Tool]:
        """List every tool the provider hosts, following pagination.

        Raises:
            ProviderProtocolError: If the provider answers with an error
        """
        tools: list[Tool] = []
        cursor: str | None = None

        while True:
            params = {"cursor": cursor} if cursor else {}
            result = await self._request("tools/list", params)

            for raw in result.get("tools", []):
                tools.append(
                    Tool(
                        name=raw["name"],
                        description=raw.get("description") or "",
                        input_schema=raw.get("inputSchema") or {},
                        provider=self,
                    )
                )

            cursor = result.get("nextCursor")
            if not cursor:
                break

        logger.debug(f"Provider {self.name} lists {len(tools)} tools")
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """Invoke a tool and return its result as text.

        Raises:
            ProviderProtocolError: If the call fails at the protocol level
        """
        result = await self._request(
            "tools/call", {"name": name, "arguments": arguments}
        )
        return protocol.extract_text(result)

    async def disconnect(self) -> None:
        """Terminate the provider process. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        process = self._process
        if process is not None and process.returncode is None:
            if process.stdin is not None:
                process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), timeout=SHUTDOWN_GRACE_PERIOD)
            except asyncio.TimeoutError:
                logger.warning(f"Provider {self.name} did not exit, killing it")
                process.kill()
                await process.wait()

        if self._reader_task is not None:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None

        self._fail_pending(ProviderProtocolError(f"Provider {self.name} disconnected"))
        logger.info(f"Disconnected provider {self.name}")

    async def _request(
        self, method: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        if not self.is_connected:
            raise ProviderProtocolError(f"Provider {self.name} is not connected")

        self._next_id += 1
        request_id = self._next_id
        future: asyncio.Future[dict[str, Any]] = (
            asyncio.get_running_loop().create_future()
        )
        self._pending[request_id] = future

        try:
            await self._send(protocol.make_request(request_id, method, params))
            if self.request_timeout is None:
                response = await future
            else:
                response = await asyncio.wait_for(future, timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise ProviderProtocolError(
                f"Provider {self.name} timed out on {method}"
            )
        finally:
            self._pending.pop(request_id, None)

        if "error" in response:
            error = response["error"] or {}
            raise ProviderProtocolError(
                f"{method} failed on {self.name}: {error.get('message', 'unknown error')}"
            )

        return response.get("result") or {}

    async def _notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        await self._send(protocol.make_notification(method, params))

    async def _send(self, message: dict[str, Any]) -> None:
        if self._process is None or self._process.stdin is None:
            raise ProviderProtocolError(f"Provider {self.name} is not connected")

        try:
            self._process.stdin.write(protocol.encode_message(message))
            await self._process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ProviderProtocolError(f"Provider {self.name} closed its input: {e}")

    async def _read_loop(self, stdout: asyncio.StreamReader) -> None:
        while True:
            line = await stdout.readline()
            if not line:
                break
            if not line.strip():
                continue

            try:
                message = protocol.decode_message(line)
            except ProviderProtocolError as e:
                logger.warning(f"Provider {self.name}: {e}")
                continue

            if not protocol.is_response(message):
                logger.debug(
                    f"Ignoring {message.get('method', 'unknown')} from {self.name}"
                )
                continue

            future = self._pending.get(message["id"])
            if future is not None and not future.done():
                future.set_result(message)
            else:
                logger.warning(
                    f"Provider {self.name} answered unknown request {message['id']}"
                )

        self._fail_pending(
            ProviderProtocolError(f"Provider {self.name} closed its output")
        )

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()

    def __repr__(self) -> str:
        return f"ProviderConnection(name={self.name!r}, connected={self.is_connected})"

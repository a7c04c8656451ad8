"""Provider discovery: connect every configured provider and list its tools."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from toolhub_server.exceptions import ProviderLoadFailure, ProviderProtocolError
from toolhub_server.providers.client import ProviderConnection
from toolhub_server.providers.config_store import ProviderConfig, ProviderConfigStore
from toolhub_server.tools.types import Tool

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[str, ProviderConfig], ProviderConnection]


@dataclass
class DiscoveredProvider:
    """A connected provider together with the tools it exposes."""

    connection: ProviderConnection
    tools: list[Tool]

    @property
    def name(self) -> str:
        return self.connection.name


class ProviderDiscovery:
    """Starts every configured provider and reports its tools.

    Providers are started concurrently but reported in config order, so the
    order tools arrive in never depends on which process answers first.
    A provider that fails is logged and skipped; the rest are unaffected.
    """

    def __init__(
        self,
        config_store: ProviderConfigStore,
        request_timeout: float | None = 30.0,
        connection_factory: ConnectionFactory | None = None,
    ):
        """Initialize the ProviderDiscovery.

        Args:
            config_store: Where provider launch configs are read from
            request_timeout: Per-request timeout handed to each connection
            connection_factory: Builds a connection from (name, config)
        """
        self.config_store = config_store
        self.request_timeout = request_timeout
        self._connection_factory = connection_factory or self._default_factory

    def _default_factory(self, name: str, config: ProviderConfig) -> ProviderConnection:
        return ProviderConnection(name, config, request_timeout=self.request_timeout)

    async def iter_providers(self) -> AsyncIterator[DiscoveredProvider]:
        """Yield connected providers in config order.

        If the consumer stops early or is cancelled, providers that were
        started but not yet yielded are cancelled or disconnected.
        """
        try:
            configs = self.config_store.load()
        except ValueError as e:
            logger.error(f"Could not read provider configs: {e}")
            return

        if not configs:
            logger.info("No tool providers configured")
            return

        tasks = [
            asyncio.create_task(
                self._connect_one(name, config), name=f"provider-connect-{name}"
            )
            for name, config in configs.items()
        ]
        handed_out = 0

        try:
            for task in tasks:
                discovered = await task
                handed_out += 1
                if discovered is not None:
                    yield discovered
        finally:
            leftover = tasks[handed_out:]
            for task in leftover:
                task.cancel()
            results = await asyncio.gather(*leftover, return_exceptions=True)
            for result in results:
                if isinstance(result, DiscoveredProvider):
                    await result.connection.disconnect()

    async def discover(self) -> list[DiscoveredProvider]:
        """Connect all providers and return them as a list."""
        return [provider async for provider in self.iter_providers()]

    async def _connect_one(
        self, name: str, config: ProviderConfig
    ) -> DiscoveredProvider | None:
        connection = self._connection_factory(name, config)

        try:
            await connection.connect()
            tools = await connection.list_tools()
        except (ProviderLoadFailure, ProviderProtocolError) as e:
            logger.warning(f"Skipping provider {name}: {e}")
            await connection.disconnect()
            return None
        except asyncio.CancelledError:
            await connection.disconnect()
            raise
        except Exception as e:
            logger.warning(f"Skipping provider {name}: {e}", exc_info=True)
            await connection.disconnect()
            return None

        logger.info(f"Provider {name} exposes {len(tools)} tools")
        return DiscoveredProvider(connection=connection, tools=tools)

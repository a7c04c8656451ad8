"""ToolSupervisor: tears down provider connections backing the catalog."""

import logging
import weakref

from toolhub_server.exceptions import DisconnectFailure
from toolhub_server.notifications import EVENT_PROVIDERS_DISCONNECTED
from toolhub_server.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolSupervisor:
    """Disconnects each provider connection at most once.

    The supervisor never owns connections; it looks them up through the
    registry's catalog when asked to shut down. Disconnected providers are
    not respawned until the registry loads again.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry
        self._disconnected: weakref.WeakSet = weakref.WeakSet()

    async def shutdown(self) -> int:
        """Cancel any in-flight load and disconnect every distinct provider.

        A cancelled load keeps the tools it already committed, so their
        connections are found and closed here too. Individual disconnect
        failures are logged and do not stop the remaining disconnects.

        Returns:
            Number of connections this call disconnected
        """
        await self.registry.cancel_load()

        connections = [
            connection
            for connection in self.registry.connections()
            if connection not in self._disconnected
        ]

        disconnected = 0
        for connection in connections:
            # Mark before awaiting so an overlapping shutdown skips it
            self._disconnected.add(connection)
            try:
                await connection.disconnect()
                disconnected += 1
            except Exception as e:
                failure = DisconnectFailure(connection.name, str(e))
                logger.error(str(failure))

        self.registry.reset()

        if disconnected:
            logger.info(f"Disconnected {disconnected} tool providers")
            self.registry.notifier.publish(
                EVENT_PROVIDERS_DISCONNECTED, count=disconnected
            )
        return disconnected

    async def reload(self) -> None:
        """Disconnect the current providers, then load the catalog again."""
        await self.shutdown()
        await self.registry.reload()

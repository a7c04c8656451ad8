"""Tool provider configuration, connection, and discovery layer.

This package launches external tool providers as subprocesses, talks to them
over stdio JSON-RPC, and reports the tools each one hosts.
"""

from toolhub_server.providers.client import ProviderConnection
from toolhub_server.providers.config_store import ProviderConfig, ProviderConfigStore
from toolhub_server.providers.discovery import DiscoveredProvider, ProviderDiscovery

__all__ = [
    "DiscoveredProvider",
    "ProviderConfig",
    "ProviderConfigStore",
    "ProviderConnection",
    "ProviderDiscovery",
]

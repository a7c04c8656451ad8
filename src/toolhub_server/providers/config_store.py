"""Provider configuration store.

This module provides the ProviderConfigStore class which persists the launch
configuration of every tool provider in a single JSON file:

    {
        "mcpServers": {
            "<name>": {"command": "...", "args": [...], "env": {...}}
        }
    }

Entry order in the file is the discovery order, and therefore the tool
name precedence order.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"


@dataclass
class ProviderConfig:
    """How to launch one tool provider process."""

    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderConfig":
        return cls(
            command=data.get("command", ""),
            args=list(data.get("args") or []),
            env=dict(data.get("env") or {}),
        )


class ProviderConfigStore:
    """File-backed store of provider launch configurations."""

    def __init__(self, config_file: Path):
        """Initialize the ProviderConfigStore.

        Args:
            config_file: Path to the JSON file. Created on first write.
        """
        self.config_file = config_file

    def load(self) -> dict[str, ProviderConfig]:
        """Load all provider configurations in file order.

        Returns:
            Mapping of provider name to its configuration. Empty if the
            file does not exist yet.

        Raises:
            ValueError: If the file exists but is not valid JSON
        """
        if not self.config_file.exists():
            return {}

        data = self._read()
        servers = data.get(SERVERS_KEY, {})

        configs: dict[str, ProviderConfig] = {}
        for name, raw in servers.items():
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed provider config: {name}")
                continue
            configs[name] = ProviderConfig.from_dict(raw)

        logger.debug(f"Loaded {len(configs)} provider configs")
        return configs

    def add(self, name: str, config: ProviderConfig) -> None:
        """Add a provider, replacing any existing one with the same name.

        Raises:
            ValueError: If the name or command is empty
        """
        name = name.strip()
        if not name:
            raise ValueError("Provider name cannot be empty")
        if not config.command.strip():
            raise ValueError("Provider command cannot be empty")

        data = self._read() if self.config_file.exists() else {}
        servers = data.setdefault(SERVERS_KEY, {})
        if name in servers:
            logger.info(f"Replacing provider config: {name}")
        servers[name] = asdict(config)

        self._write(data)
        logger.info(f"Added provider config: {name}")

    def remove(self, name: str) -> bool:
        """Remove a provider.

        Returns:
            True if the provider existed and was removed, False otherwise
        """
        if not self.config_file.exists():
            return False

        data = self._read()
        servers = data.get(SERVERS_KEY, {})
        if name not in servers:
            return False

        del servers[name]
        self._write(data)
        logger.info(f"Removed provider config: {name}")
        return True

    def _read(self) -> dict[str, Any]:
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Provider config file is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise ValueError("Provider config file must contain a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

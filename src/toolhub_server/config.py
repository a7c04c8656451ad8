"""Configuration module for toolhub-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolhubServerSettings(BaseSettings):
    """Main configuration settings for toolhub-server.

    All settings can be overridden via environment variables with the TOOLHUB_ prefix.
    For example, TOOLHUB_OLLAMA_HOST will override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.2:latest"

    # Data directories (relative to data_dir)
    data_dir: str = "."
    providers_file: str = "mcp_servers.json"

    # Session defaults
    default_instructions: str = "You are a helpful assistant."
    default_temperature: float = 0.7
    max_response_tokens: int | None = None
    max_tool_rounds: int = 8

    # Tool registry
    general_bucket_name: str = "General"
    provider_request_timeout: float | None = 30.0
    load_tools_on_startup: bool = True

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLHUB_")

    # --- Resolved paths (computed from data_dir + relative paths) ---

    @property
    def resolved_providers_file(self) -> Path:
        """Get the full path to the provider configuration file."""
        return Path(self.data_dir) / self.providers_file

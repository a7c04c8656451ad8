"""CLI entry point for toolhub-server.

Run as `toolhub-server` (script entry point) or `python -m toolhub_server`.
Flags override the matching TOOLHUB_* environment variables.
"""

import argparse
import logging
import sys

import uvicorn

from toolhub_server import __version__, create_app
from toolhub_server.config import ToolhubServerSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# argparse dest -> settings field
SETTING_FLAGS = {
    "host": "host",
    "port": "port",
    "ollama_host": "ollama_host",
    "model": "model",
    "data_dir": "data_dir",
    "providers_file": "providers_file",
    "log_level": "log_level",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolhub-server",
        description=(
            "Serve a catalog of MCP provider tools and chat sessions "
            "that use them through Ollama"
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"toolhub-server {__version__}"
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help="Bind address (TOOLHUB_HOST, default 127.0.0.1)")
    server.add_argument(
        "--port", type=int, help="Bind port (TOOLHUB_PORT, default 8000)"
    )
    server.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level for the server and uvicorn (TOOLHUB_LOG_LEVEL)",
    )

    model = parser.add_argument_group("model")
    model.add_argument("--ollama-host", help="Ollama URL (TOOLHUB_OLLAMA_HOST)")
    model.add_argument("--model", help="Ollama model used for replies (TOOLHUB_MODEL)")

    tools = parser.add_argument_group("tool providers")
    tools.add_argument(
        "--data-dir", help="Directory holding the provider config (TOOLHUB_DATA_DIR)"
    )
    tools.add_argument(
        "--providers-file",
        help="Provider config file inside the data directory (TOOLHUB_PROVIDERS_FILE)",
    )
    tools.add_argument(
        "--no-load-tools",
        action="store_true",
        help="Do not start providers at startup; they start on first use",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ToolhubServerSettings:
    overrides = {
        field: getattr(args, dest)
        for dest, field in SETTING_FLAGS.items()
        if getattr(args, dest) is not None
    }
    if args.no_load_tools:
        overrides["load_tools_on_startup"] = False
    return ToolhubServerSettings(**overrides)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and run the server."""
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())

"""JSON-RPC 2.0 framing for tool providers.

Providers speak newline-delimited JSON-RPC over their stdin/stdout.
Only the handful of messages the registry needs are built here.
"""

import json
from typing import Any

from toolhub_server.exceptions import ProviderProtocolError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
CLIENT_INFO = {"name": "toolhub-server", "version": "0.1.0"}


def make_request(
    request_id: int, method: str, params: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a JSON-RPC request object."""
    message: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": method,
    }
    if params is not None:
        message["params"] = params
    return message


def make_notification(
    method: str, params: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a JSON-RPC notification (no id, no response expected)."""
    message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        message["params"] = params
    return message


def initialize_params() -> dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {},
        "clientInfo": CLIENT_INFO,
    }


def encode_message(message: dict[str, Any]) -> bytes:
    """Encode a message as a single UTF-8 line."""
    return (json.dumps(message, ensure_ascii=False) + "\n").encode("utf-8")


def decode_message(line: bytes) -> dict[str, Any]:
    """Decode one line read from a provider.

    Raises:
        ProviderProtocolError: If the line is not a JSON object
    """
    try:
        message = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProviderProtocolError(f"Invalid message from provider: {e}")

    if not isinstance(message, dict):
        raise ProviderProtocolError("Provider message is not a JSON object")

    return message


def is_response(message: dict[str, Any]) -> bool:
    """Check whether a message answers one of our requests."""
    return "id" in message and ("result" in message or "error" in message)


def extract_text(result: dict[str, Any]) -> str:
    """Flatten a tools/call result into plain text.

    Text content blocks are joined with newlines; other block types are
    represented by their JSON encoding.
    """
    parts: list[str] = []
    for block in result.get("content", []):
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
        else:
            parts.append(json.dumps(block, ensure_ascii=False))

    text = "\n".join(parts)
    if result.get("isError"):
        return f"Error: {text}" if text else "Error: tool call failed"
    return text

"""Unit tests for JSON-RPC framing helpers."""

import json

import pytest

from toolhub_server.exceptions import ProviderProtocolError
from toolhub_server.providers import protocol


def test_make_request():
    assert protocol.make_request(3, "tools/list", {"cursor": "x"}) == {
        "jsonrpc": "2.0",
        "id": 3,
        "method": "tools/list",
        "params": {"cursor": "x"},
    }
    assert "params" not in protocol.make_request(1, "ping")


def test_make_notification_has_no_id():
    message = protocol.make_notification("notifications/initialized")

    assert message == {"jsonrpc": "2.0", "method": "notifications/initialized"}


def test_initialize_params():
    params = protocol.initialize_params()

    assert params["protocolVersion"] == protocol.PROTOCOL_VERSION
    assert params["clientInfo"]["name"] == "toolhub-server"


def test_encode_message_is_one_line():
    encoded = protocol.encode_message({"jsonrpc": "2.0", "method": "x", "params": {"t": "a\nb"}})

    assert encoded.endswith(b"\n")
    assert encoded.count(b"\n") == 1
    assert json.loads(encoded)["params"]["t"] == "a\nb"


def test_decode_message():
    assert protocol.decode_message(b'{"jsonrpc": "2.0", "id": 1, "result": {}}\n')["id"] == 1


@pytest.mark.parametrize("line", [b"not json\n", b"[1, 2]\n", b"\xff\xfe\n"])
def test_decode_message_rejects_garbage(line):
    with pytest.raises(ProviderProtocolError):
        protocol.decode_message(line)


def test_is_response():
    assert protocol.is_response({"id": 1, "result": {}})
    assert protocol.is_response({"id": 1, "error": {"code": -1}})
    assert not protocol.is_response({"method": "notifications/progress"})
    assert not protocol.is_response({"id": 5, "method": "sampling/createMessage"})


def test_extract_text_joins_blocks():
    result = {
        "content": [
            {"type": "text", "text": "first"},
            {"type": "image", "data": "abc", "mimeType": "image/png"},
            {"type": "text", "text": "second"},
        ]
    }

    lines = protocol.extract_text(result).split("\n")

    assert lines[0] == "first"
    assert json.loads(lines[1])["type"] == "image"
    assert lines[2] == "second"


def test_extract_text_marks_errors():
    assert protocol.extract_text(
        {"content": [{"type": "text", "text": "boom"}], "isError": True}
    ) == "Error: boom"
    assert protocol.extract_text({"content": [], "isError": True}) == "Error: tool call failed"

"""Unit tests for the command-line entry point."""

from unittest.mock import patch

import pytest

from toolhub_server.__main__ import build_parser, main, settings_from_args


def test_flags_override_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("TOOLHUB_PORT", "9000")
    args = build_parser().parse_args(
        [
            "--port",
            "9100",
            "--model",
            "qwen3:8b",
            "--data-dir",
            str(tmp_path),
            "--providers-file",
            "servers.json",
            "--no-load-tools",
        ]
    )

    settings = settings_from_args(args)

    assert settings.port == 9100
    assert settings.model == "qwen3:8b"
    assert settings.resolved_providers_file == tmp_path / "servers.json"
    assert settings.load_tools_on_startup is False


def test_environment_used_when_flag_missing(monkeypatch):
    monkeypatch.setenv("TOOLHUB_OLLAMA_HOST", "http://gpu-box:11434")

    settings = settings_from_args(build_parser().parse_args([]))

    assert settings.ollama_host == "http://gpu-box:11434"
    assert settings.load_tools_on_startup is True


def test_rejects_unknown_log_level():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--log-level", "LOUD"])


def test_main_runs_uvicorn_with_settings():
    with patch("toolhub_server.__main__.uvicorn.run") as run:
        main(["--host", "0.0.0.0", "--port", "8123", "--log-level", "WARNING"])

    run.assert_called_once()
    kwargs = run.call_args.kwargs
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8123
    assert kwargs["log_level"] == "warning"
    assert run.call_args.args[0].state.settings.port == 8123

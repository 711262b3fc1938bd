"""
Tests for the uvicorn launcher in index.py.
"""

import pytest

import index


@pytest.mark.parametrize("raw, expected", [("true", True), (" On ", True), ("0", False), ("no", False)])
def test_parse_bool_env(monkeypatch, raw, expected):
    monkeypatch.setenv("DEV", raw)
    assert index.parse_bool_env("DEV") is expected


def test_parse_bool_env_rejects_unknown(monkeypatch):
    monkeypatch.setenv("DEV", "maybe")
    with pytest.raises(RuntimeError):
        index.parse_bool_env("DEV")


def test_required_env_missing(monkeypatch):
    monkeypatch.delenv("NEWSROOM_UNSET_VARIABLE", raising=False)
    with pytest.raises(RuntimeError):
        index.required_env("NEWSROOM_UNSET_VARIABLE")


def test_build_command(monkeypatch):
    monkeypatch.setenv("HOST", "127.0.0.1")
    assert index.build_command(9000, dev=True) == [
        "uvicorn",
        "newsroom.server:app",
        "--reload",
        "--host",
        "127.0.0.1",
        "--port",
        "9000",
    ]
    assert "--reload" not in index.build_command(9000, dev=False)


def test_server_run_passes_import_string(monkeypatch):
    import uvicorn

    from newsroom import server

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr(server, "_settings", server._settings.model_copy(update={"dev": True, "port": 9100}))

    server.run()

    args, kwargs = calls[0]
    assert args == ("newsroom.server:app",)
    assert kwargs["reload"] is True
    assert kwargs["port"] == 9100

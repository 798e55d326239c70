import json
from pathlib import Path

import pytest

from typedxmlrpc.client import Client
from typedxmlrpc.config.loader import camel_to_snake, convert_keys, load_config, save_config, snake_to_camel
from typedxmlrpc.config.schema import ClientConfig
from typedxmlrpc.transport import DEFAULT_USER_AGENT, HttpxTransport


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.json")
    assert cfg.server_uri == "http://localhost:8000"
    assert cfg.timeout_seconds == 10.0
    assert cfg.user_agent == DEFAULT_USER_AGENT


def test_load_camel_case_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "serverUri": "https://rpc.example.com/RPC2",
                "timeoutSeconds": 2.5,
                "verifyTls": False,
                "headers": {"X-Api-Key": "k"},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.server_uri == "https://rpc.example.com/RPC2"
    assert cfg.timeout_seconds == 2.5
    assert cfg.verify_tls is False
    assert cfg.headers == {"X-Api-Key": "k"}


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    save_config(ClientConfig(server_uri="http://h/RPC2", headers={"Authorization": "Bearer x"}), path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["serverUri"] == "http://h/RPC2"
    assert data["headers"] == {"Authorization": "Bearer x"}
    assert load_config(path).headers == {"Authorization": "Bearer x"}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"timeoutSeconds": 0}', '{"serverUri": "ftp://x"}'])
def test_invalid_files_raise_value_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYPEDXMLRPC_SERVER_URI", "http://env-host:9000/RPC2")
    monkeypatch.setenv("TYPEDXMLRPC_TIMEOUT_SECONDS", "3")
    cfg = ClientConfig()
    assert cfg.server_uri == "http://env-host:9000/RPC2"
    assert cfg.timeout_seconds == 3.0


def test_client_from_config() -> None:
    cfg = ClientConfig(server_uri="http://h/RPC2", timeout_seconds=4, user_agent="ua", headers={"A": "b"})
    client = Client.from_config(cfg)
    assert client.server_uri == "http://h/RPC2"
    assert client.timeout == 4.0
    assert isinstance(client.transport, HttpxTransport)
    assert client.transport.user_agent == "ua"
    assert client.transport.headers == {"A": "b"}


def test_key_case_helpers() -> None:
    assert camel_to_snake("timeoutSeconds") == "timeout_seconds"
    assert snake_to_camel("verify_tls") == "verifyTls"
    assert convert_keys({"followRedirects": True, "headers": {"X-Trace-Id": "1"}}) == {
        "follow_redirects": True,
        "headers": {"X-Trace-Id": "1"},
    }

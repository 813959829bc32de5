"""Layered configuration: defaults, config file, environment, overrides."""
from __future__ import annotations

import json

import pytest

from sse_chat.base.timeouts import get_timeout_config
from sse_chat.config import get_stream_config, reset_config_cache
from sse_chat.config.defaults import DEV_SERVER_ENDPOINT


def test_defaults_point_at_dev_server():
    settings = get_stream_config()
    assert settings.endpoint == DEV_SERVER_ENDPOINT  # nosec B101
    assert settings.api_key is None  # nosec B101
    assert settings.malformed_retry_limit == 1  # nosec B101
    assert settings.start_attempts == 3  # nosec B101


def test_yaml_file_then_env_then_overrides(monkeypatch, tmp_path):
    cfg = tmp_path / "chat.yaml"
    cfg.write_text(
        "endpoint: https://file.example/functions/v1/chat\n"
        "api_key: ${CHAT_TOKEN}\n"
        "malformed_retry_limit: 4\n"
        "unrelated: ignored\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SSE_CHAT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("CHAT_TOKEN", "from-env-token")
    settings = get_stream_config()
    assert settings.endpoint == "https://file.example/functions/v1/chat"  # nosec B101
    assert settings.api_key == "from-env-token"  # nosec B101
    assert settings.malformed_retry_limit == 4  # nosec B101

    monkeypatch.setenv("SSE_CHAT_MALFORMED_RETRY_LIMIT", "2")
    assert get_stream_config().malformed_retry_limit == 2  # nosec B101
    settings = get_stream_config({"malformed_retry_limit": 0, "endpoint": None})
    assert settings.malformed_retry_limit == 0  # nosec B101
    assert settings.endpoint == "https://file.example/functions/v1/chat"  # nosec B101


def test_json_file(monkeypatch, tmp_path):
    cfg = tmp_path / "chat.json"
    cfg.write_text(json.dumps({"start_attempts": 5}), encoding="utf-8")
    monkeypatch.setenv("SSE_CHAT_CONFIG_FILE", str(cfg))
    assert get_stream_config().start_attempts == 5  # nosec B101


def test_non_mapping_file_is_rejected(monkeypatch, tmp_path):
    cfg = tmp_path / "chat.yaml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("SSE_CHAT_CONFIG_FILE", str(cfg))
    with pytest.raises(ValueError):
        get_stream_config()


@pytest.mark.parametrize("value", ["many", "-1"])
def test_invalid_integers_are_rejected(monkeypatch, value):
    monkeypatch.setenv("SSE_CHAT_START_ATTEMPTS", value)
    with pytest.raises(ValueError):
        get_stream_config()


def test_start_attempts_is_at_least_one():
    assert get_stream_config({"start_attempts": 0}).start_attempts == 1  # nosec B101


def test_dotenv_does_not_override_environment(monkeypatch, tmp_path):
    env_file = tmp_path / "chat.env"
    env_file.write_text(
        "# local settings\nSSE_CHAT_API_KEY='dotenv-key'\nSSE_CHAT_ENDPOINT=http://dotenv/chat\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("DOTENV_FILE", str(env_file))
    monkeypatch.setenv("SSE_CHAT_ENDPOINT", "http://env/chat")
    # values loaded from the file must not leak into later tests
    monkeypatch.setenv("SSE_CHAT_API_KEY", "placeholder")
    monkeypatch.delenv("SSE_CHAT_API_KEY")
    reset_config_cache()
    settings = get_stream_config()
    assert settings.endpoint == "http://env/chat"  # nosec B101
    assert settings.api_key == "dotenv-key"  # nosec B101


def test_timeout_env_overrides(monkeypatch):
    monkeypatch.setenv("SSE_CHAT_READ_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("SSE_CHAT_CONNECT_TIMEOUT_SECONDS", "not-a-number")
    cfg = get_timeout_config()
    assert cfg.read_timeout_seconds == 5.0  # nosec B101
    assert cfg.connect_timeout_seconds == 10.0  # nosec B101
    timeout = get_stream_config().timeouts.to_httpx()
    assert timeout.read == 5.0  # nosec B101

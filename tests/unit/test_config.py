"""Unit tests for client configuration."""

from __future__ import annotations

import pytest

from obs_websocket.config import (
    DEFAULT_URL,
    ENV_PASSWORD,
    ENV_TIMEOUT,
    ENV_URL,
    ClientConfig,
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (ENV_URL, ENV_PASSWORD, ENV_TIMEOUT):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestClientConfig:
    """Tests for defaults and environment handling."""

    def test_defaults(self) -> None:
        config = ClientConfig()

        assert config.url == DEFAULT_URL
        assert config.password is None
        assert config.timeout == 30.0
        assert config.message_id_length == 16

    def test_from_env(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv(ENV_URL, "ws://studio:4455")
        clean_env.setenv(ENV_PASSWORD, "secret")
        clean_env.setenv(ENV_TIMEOUT, "5")

        config = ClientConfig.from_env()

        assert config.url == "ws://studio:4455"
        assert config.password == "secret"
        assert config.timeout == 5.0

    def test_overrides_win(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv(ENV_URL, "ws://studio:4455")

        config = ClientConfig.from_env(url="ws://other:4444", password=None)

        assert config.url == "ws://other:4444"
        assert config.password is None

    def test_empty_env(self, clean_env: pytest.MonkeyPatch) -> None:
        assert ClientConfig.from_env() == ClientConfig()

    def test_invalid_timeout(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv(ENV_TIMEOUT, "soon")

        with pytest.raises(ValueError, match=ENV_TIMEOUT):
            ClientConfig.from_env()

    def test_unknown_override(self, clean_env: pytest.MonkeyPatch) -> None:
        with pytest.raises(TypeError):
            ClientConfig.from_env(port=4444)

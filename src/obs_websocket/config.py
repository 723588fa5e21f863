"""Client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any

DEFAULT_URL = "ws://localhost:4444"

ENV_URL = "OBS_WEBSOCKET_URL"
ENV_PASSWORD = "OBS_WEBSOCKET_PASSWORD"
ENV_TIMEOUT = "OBS_WEBSOCKET_TIMEOUT"


@dataclass
class ClientConfig:
    """Configuration for ObsWebSocketClient.

    Explicit values passed to from_env() take precedence over the
    OBS_WEBSOCKET_* environment variables.
    """

    # Connection
    url: str = DEFAULT_URL
    password: str | None = None
    open_timeout: float = 10.0

    # Per-request wait; None waits until the response or teardown
    timeout: float | None = 30.0

    # Keepalive (websockets ping frames)
    ping_interval: float | None = 20.0
    ping_timeout: float | None = 20.0

    message_id_length: int = 16

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config from the environment, then apply non-None overrides."""
        config = cls()

        url = os.environ.get(ENV_URL)
        if url:
            config.url = url

        password = os.environ.get(ENV_PASSWORD)
        if password:
            config.password = password

        timeout = os.environ.get(ENV_TIMEOUT)
        if timeout:
            try:
                config.timeout = float(timeout)
            except ValueError as e:
                raise ValueError(f"{ENV_TIMEOUT} must be a number, got {timeout!r}") from e

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config options: {', '.join(sorted(unknown))}")

        return replace(config, **{k: v for k, v in overrides.items() if v is not None})

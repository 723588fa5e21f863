"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from obs_websocket import ClientConfig, MockTransport, ObsWebSocketClient, create_mock_transport


@pytest.fixture
def mock_transport() -> MockTransport:
    """Mock transport that reports no authentication required."""
    return create_mock_transport()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(url="ws://obs.test:4444", timeout=2.0)


@pytest_asyncio.fixture
async def client(config: ClientConfig, mock_transport: MockTransport) -> AsyncIterator[ObsWebSocketClient]:
    """Connected client over the mock transport, handshake requests cleared."""
    client = ObsWebSocketClient(config, transport=mock_transport)
    await client.connect()
    mock_transport.clear_sent()
    yield client
    await client.disconnect()

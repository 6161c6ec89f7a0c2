"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, List

from oscar_relay.mailbox.store import MessageStore
from oscar_relay.protocol.parser import ProtocolParser
from oscar_relay.network.tcp_server import RelayServer


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# MessageStore Fixtures
# ============================================================================

@pytest.fixture
def store() -> MessageStore:
    """Create a fresh MessageStore with default sharding."""
    return MessageStore()


@pytest.fixture
def single_shard_store() -> MessageStore:
    """Create a MessageStore where every mailbox shares one lock."""
    return MessageStore(num_shards=1)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[RelayServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a RelayServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = RelayServer(host='127.0.0.1', port=server_port, buffer_limit=1024)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    The relay answers a single request per connection, so each call to
    request() opens its own connection and reads until the server closes it.

    Usage:
        client = AsyncClient('127.0.0.1', 5190)
        lines = await client.request("RECEIVE|bob")
        assert lines == ["ERROR|No messages found for user"]
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port

    async def request_raw(self, payload: bytes) -> bytes:
        """Send raw bytes and return everything the server writes back."""
        reader, writer = await asyncio.open_connection(self.host, self.port)
        try:
            writer.write(payload)
            await writer.drain()
            return await reader.read()
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except Exception:
                pass

    async def request(self, line: str) -> List[str]:
        """
        Send one request line and collect the response.

        Args:
            line: Request line (newline will be added if missing)

        Returns:
            Response lines, without line terminators
        """
        if not line.endswith('\n'):
            line += '\n'

        response = await self.request_raw(line.encode())
        return response.decode().splitlines()

    async def send(self, sender: str, recipient: str, content: str, timestamp: str) -> List[str]:
        """Send a SEND request."""
        return await self.request(f"SEND|{sender}|{recipient}|{content}|{timestamp}")

    async def receive(self, user: str) -> List[str]:
        """Send a RECEIVE request."""
        return await self.request(f"RECEIVE|{user}")


@pytest.fixture
def client(server_port: int) -> AsyncClient:
    """Create a test client pointed at the test server's port."""
    return AsyncClient('127.0.0.1', server_port)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, Optional

from crckv.cache.store import KVStore
from crckv.network.framing import pack_string, read_string
from crckv.network.session import RequestHandler
from crckv.network.tcp_server import KVTCPServer
from crckv.network.udp_server import KVUDPServer
from crckv.protocol.checksum import decode, encode, validate
from crckv.protocol.parser import ProtocolParser


def find_free_port(kind: int = socket.SOCK_STREAM) -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, kind)) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


async def stop_server(srv, task: asyncio.Task) -> None:
    """Stop a server started as a background task and reap the task."""
    await srv.stop()
    task.cancel()
    try:
        await task
    except (asyncio.CancelledError, ConnectionError):
        pass


# ============================================================================
# Store / Protocol Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh KVStore instance."""
    return KVStore()


@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def handler(store: KVStore) -> RequestHandler:
    """Create a RequestHandler backed by the store fixture."""
    return RequestHandler(store)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free TCP port for server testing."""
    return find_free_port()


@pytest.fixture
def udp_port() -> int:
    """Get a free UDP port for server testing."""
    return find_free_port(socket.SOCK_DGRAM)


@pytest_asyncio.fixture
async def tcp_server(server_port: int) -> AsyncGenerator[KVTCPServer, None]:
    """
    Create and start a TCP server instance for testing.

    The server task is exposed as ``srv.task`` so tests can wait for the
    session to end.
    """
    srv = KVTCPServer(host='127.0.0.1', port=server_port, timeout=5.0)
    srv.task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    await stop_server(srv, srv.task)


@pytest_asyncio.fixture
async def udp_server(udp_port: int) -> AsyncGenerator[KVUDPServer, None]:
    """Create and start a UDP server instance for testing."""
    srv = KVUDPServer(host='127.0.0.1', port=udp_port, timeout=5.0)
    srv.task = asyncio.create_task(srv.start())

    await asyncio.sleep(0.1)

    yield srv

    await stop_server(srv, srv.task)


# ============================================================================
# Client Helpers
# ============================================================================

class AsyncClient:
    """
    Raw TCP client for low-level protocol testing.

    Usage:
        async with AsyncClient('127.0.0.1', port) as client:
            reply = await client.send_command("get, name")
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass

    async def send_frame(self, frame: str) -> str:
        """Send a frame exactly as given and return the raw reply frame."""
        self.writer.write(pack_string(frame))
        await self.writer.drain()
        return await asyncio.wait_for(read_string(self.reader), timeout=5.0)

    async def send_command(self, payload: str) -> str:
        """
        Checksum-frame a payload, send it, and return the reply payload.

        The reply's checksum is asserted to be valid.
        """
        checksum, reply = decode(await self.send_frame(encode(payload)))
        assert validate(checksum, reply)
        return reply

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


def udp_exchange(port: int, frame: str, timeout: float = 5.0) -> Optional[str]:
    """Send one raw datagram and return the raw reply frame."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_DGRAM)) as s:
        s.settimeout(timeout)
        s.sendto(frame.encode("utf-8"), ('127.0.0.1', port))
        data, _ = s.recvfrom(1024)
        return data.decode("utf-8")


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

"""
Integration Tests

End-to-end tests that drive the real clients against the real servers
over both transports.

Run with: python -m pytest tests/test_integration.py -v
"""

import asyncio
import pytest
import pytest_asyncio

from crckv.client import PREPOPULATE_REQUESTS, SEED_DATA, prepopulate, sweep
from crckv.network.tcp_client import TCPClient
from crckv.network.tcp_server import KVTCPServer
from crckv.network.udp_client import UDPClient
from crckv.network.udp_server import KVUDPServer
from tests.conftest import stop_server
from crckv.protocol.commands import (
    KEY_NOT_FOUND,
    KEY_REMOVED,
    SHUTDOWN_NOTICE,
)


def run_session(client, requests):
    """Open the client, send every request, and collect the replies."""
    with client:
        return [client.request(r) for r in requests]


@pytest_asyncio.fixture(params=["tcp", "udp"])
async def live_server(request, server_port, udp_port):
    """
    Start a server for each transport and pair it with a matching client.

    The server task is exposed as ``srv.task``.
    """
    if request.param == "tcp":
        srv = KVTCPServer(host='127.0.0.1', port=server_port, timeout=5.0)
        client = TCPClient('127.0.0.1', server_port, timeout=5.0)
    else:
        srv = KVUDPServer(host='127.0.0.1', port=udp_port, timeout=5.0)
        client = UDPClient('127.0.0.1', udp_port, timeout=5.0)

    srv.task = asyncio.create_task(srv.start())
    await asyncio.sleep(0.1)

    yield srv, client

    await stop_server(srv, srv.task)


@pytest.mark.asyncio
@pytest.mark.integration
class TestEndToEnd:
    """End-to-end integration tests."""

    async def test_put_get_delete_scenario(self, live_server):
        """Test the put / get / delete / get workflow."""
        srv, client = live_server
        replies = await asyncio.to_thread(run_session, client, [
            "put, name, dominic",
            "get, name",
            "delete, name",
            "get, name",
            "q",
        ])

        assert replies == [
            "New value for key, name, added -> dominic",
            "dominic",
            KEY_REMOVED,
            KEY_NOT_FOUND,
            SHUTDOWN_NOTICE,
        ]
        await asyncio.wait_for(srv.task, timeout=2.0)

    async def test_quit_stops_processing(self, live_server):
        """Test nothing is processed after the quit sentinel."""
        srv, client = live_server
        replies = await asyncio.to_thread(run_session, client, ["put, a, 1", "q"])

        assert replies[-1] == SHUTDOWN_NOTICE
        await asyncio.wait_for(srv.task, timeout=2.0)
        assert not srv.is_running()
        assert srv.store.size() == 1

    async def test_overwrite_through_server(self, live_server):
        """Test a second PUT reports the old and new values."""
        srv, client = live_server
        replies = await asyncio.to_thread(run_session, client, [
            "put, job, analyst",
            "put, job, engineer",
            "get, job",
            "q",
        ])

        assert replies[1] == "Old Value, analyst, for key, job, replaced with new value, engineer."
        assert replies[2] == "engineer"

    async def test_invalid_requests_keep_session_alive(self, live_server):
        """Test grammar errors are answered and the session continues."""
        srv, client = live_server
        replies = await asyncio.to_thread(run_session, client, [
            "foo",
            "put,a,b,c",
            "foo,a",
            "get, a",
            "q",
        ])

        assert all(r.startswith("Received an invalid request") for r in replies[:3])
        assert replies[3] == KEY_NOT_FOUND
        assert replies[4] == SHUTDOWN_NOTICE

    async def test_values_are_lowercased(self, live_server):
        """Test values come back lower-cased like keys."""
        srv, client = live_server
        replies = await asyncio.to_thread(run_session, client, [
            "put, degree, CS",
            "get, DEGREE",
            "q",
        ])
        assert replies[1] == "cs"


@pytest.mark.asyncio
@pytest.mark.integration
class TestBatchDrivers:
    """Run the demo batch drivers against live servers."""

    async def test_prepopulate(self, live_server):
        """Test the five fixed PUTs land in the server store."""
        srv, client = live_server

        def drive():
            with client:
                results = prepopulate(client)
                client.request("q")
                return results

        results = await asyncio.to_thread(drive)

        assert len(results) == len(PREPOPULATE_REQUESTS)
        assert all(r.startswith("New value for key") for r in results)
        assert srv.store.size() == 5
        assert srv.store.get("professor") == "saripalli"

    async def test_sweep_leaves_store_empty(self, live_server):
        """Test the PUT/GET/DELETE sweep cleans up after itself."""
        srv, client = live_server

        def drive():
            with client:
                exchanges = sweep(client)
                client.request("q")
                return exchanges

        exchanges = await asyncio.to_thread(drive)
        replies = dict(exchanges)

        assert len(exchanges) == 3 * len(SEED_DATA)
        assert replies["get, name"] == "dominic"
        assert replies["get, degree"] == "cs"
        assert replies["delete, job"] == KEY_REMOVED
        assert srv.store.size() == 0

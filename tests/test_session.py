"""
Tests for RequestHandler and read_reply()

These tests drive the transport-independent request handling directly,
without sockets.

Run with: python -m pytest tests/test_session.py -v
"""

import logging

from crckv.cache.store import KVStore
from crckv.network.session import RequestHandler, read_reply
from crckv.protocol.checksum import encode
from crckv.protocol.commands import (
    KEY_NOT_FOUND,
    MALFORMED_PACKET,
    MALFORMED_REPLY,
    SHUTDOWN_NOTICE,
)

PEER = ("127.0.0.1", 40000)


class TestRequestHandler:
    """Test RequestHandler.handle()."""

    def test_valid_put(self, handler: RequestHandler, store: KVStore):
        """Test a valid PUT frame reaches the store."""
        reply, done = handler.handle(encode("put, name, dominic"), PEER)

        assert reply == "New value for key, name, added -> dominic"
        assert done is False
        assert store.exists("name")

    def test_valid_get(self, handler: RequestHandler, store: KVStore):
        """Test a valid GET frame returns the stored value."""
        store.put("name", "dominic")
        reply, _ = handler.handle(encode("get, name"), PEER)
        assert reply == "dominic"

    def test_missing_header(self, handler: RequestHandler, store: KVStore):
        """Test a frame without checksum header is answered as malformed."""
        reply, done = handler.handle("put, name, dominic", PEER)

        assert reply == MALFORMED_PACKET
        assert done is False
        assert store.size() == 0

    def test_checksum_mismatch(self, handler: RequestHandler, store: KVStore):
        """Test a bad checksum is never dispatched."""
        reply, done = handler.handle("12345:put, name, dominic", PEER)

        assert reply == MALFORMED_PACKET
        assert done is False
        assert store.size() == 0

    def test_tampered_payload(self, handler: RequestHandler, store: KVStore):
        """Test a payload changed after framing is rejected."""
        frame = encode("put, name, dominic").replace("dominic", "mallory")
        reply, _ = handler.handle(frame, PEER)

        assert reply == MALFORMED_PACKET
        assert store.size() == 0

    def test_invalid_command(self, handler: RequestHandler):
        """Test a well-formed frame with bad grammar gets an error string."""
        reply, done = handler.handle(encode("foo, a"), PEER)

        assert reply.startswith("Received an invalid request, FOO")
        assert done is False

    def test_invalid_command_logs_diagnostic(self, handler: RequestHandler, caplog):
        """Test the diagnostic line is logged with the peer address."""
        with caplog.at_level(logging.WARNING, logger="crckv.network.session"):
            handler.handle(encode("foo"), PEER)

        assert any(
            "Received malformed request of length 3 from address 127.0.0.1, port 40000" in r.getMessage()
            for r in caplog.records
        )

    def test_quit(self, handler: RequestHandler):
        """Test the quit sentinel ends the session with a shutdown notice."""
        reply, done = handler.handle(encode("q"), PEER)

        assert reply == SHUTDOWN_NOTICE
        assert done is True

    def test_quit_upper_case(self, handler: RequestHandler):
        """Test the quit sentinel is case-insensitive."""
        _, done = handler.handle(encode("Q"), PEER)
        assert done is True

    def test_quit_ignores_checksum(self, handler: RequestHandler):
        """Test quit is honoured before checksum validation."""
        reply, done = handler.handle("0:q", PEER)

        assert reply == SHUTDOWN_NOTICE
        assert done is True

    def test_counts_requests(self, handler: RequestHandler):
        """Test every frame is counted, good or bad."""
        handler.handle(encode("get, a"), PEER)
        handler.handle("garbage", PEER)
        assert handler.total_requests == 2

    def test_default_store(self):
        """Test a handler creates its own store when none is given."""
        handler = RequestHandler()
        reply, _ = handler.handle(encode("get, x"))
        assert reply == KEY_NOT_FOUND


class TestReadReply:
    """Test read_reply() on the client side."""

    def test_valid_reply(self):
        """Test a valid reply yields its payload."""
        assert read_reply(encode("dominic")) == "dominic"

    def test_reply_with_colon(self):
        """Test a reply payload may contain colons."""
        assert read_reply(encode("a:b")) == "a:b"

    def test_bad_checksum(self):
        """Test a reply with a wrong checksum is reported as malformed."""
        assert read_reply("1:dominic") == MALFORMED_REPLY

    def test_missing_header(self):
        """Test a reply without header is reported as malformed."""
        assert read_reply("dominic") == MALFORMED_REPLY

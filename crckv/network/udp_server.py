"""
Async UDP Server Module

This module implements the UDP half of the crc-kv server.

Each request is a single datagram and each reply is a single datagram
sent back to the address the last request came from. There is no
connection; the session is simply whoever sent the latest packet.
"""

import asyncio
import logging
from typing import Optional, Tuple

from ..cache.store import KVStore
from ..config.settings import settings
from ..protocol.checksum import encode
from ..protocol.commands import CLIENT_UNRESPONSIVE, Peer, format_peer
from .session import RequestHandler

logger = logging.getLogger(__name__)


class _DatagramQueue(asyncio.DatagramProtocol):
    """Protocol that hands every inbound datagram to a queue."""

    def __init__(self, queue: asyncio.Queue):
        self.queue = queue

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        self.queue.put_nowait((data, addr))

    def error_received(self, exc: Exception) -> None:
        logger.warning(f"UDP error received: {exc}")


class KVUDPServer:
    """
    Asynchronous UDP server for crc-kv.

    Usage:
        server = KVUDPServer(host='0.0.0.0', port=4999)
        await server.start()  # Returns once a client quits

    Attributes:
        host: Server bind address
        port: Server port number
        timeout: Seconds to wait for each datagram before logging the
                 client as unresponsive
        buffer_size: Datagrams are truncated to this many bytes
        store: The KVStore the session operates on
        handler: The RequestHandler shared with the TCP server
        peer: Address of the last sender, target of the next reply
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            timeout: float = None,
            buffer_size: int = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.RECEIVE_TIMEOUT
        self.buffer_size = buffer_size if buffer_size is not None else settings.UDP_BUFFER_SIZE
        self.handler = RequestHandler(store)
        self.store = self.handler.store
        self.peer: Optional[Peer] = None

        self._transport: Optional[asyncio.DatagramTransport] = None
        self._queue: Optional[asyncio.Queue] = None
        self._running = False

    async def receive_data(self) -> str:
        """
        Wait for one datagram and record its sender.

        Raises:
            asyncio.TimeoutError: If nothing arrives within the timeout.
        """
        data, addr = await asyncio.wait_for(self._queue.get(), timeout=self.timeout)
        self.peer = (addr[0], addr[1])
        return data[:self.buffer_size].decode("utf-8", errors="replace")

    def send_packet(self, result: str) -> str:
        """Frame a reply and send it to the last sender."""
        self._transport.sendto(encode(result).encode("utf-8"), self.peer)
        return result

    async def serve(self) -> None:
        """Answer datagrams until one carries the quit sentinel."""
        while True:
            try:
                frame = await self.receive_data()
            except asyncio.TimeoutError:
                logger.warning(CLIENT_UNRESPONSIVE)
                continue

            reply, done = self.handler.handle(frame, self.peer)
            self.send_packet(reply)

            if done:
                logger.info(f"Session with {format_peer(self.peer)} finished")
                break

    async def start(self) -> None:
        """
        Bind the datagram endpoint and serve until a client quits.

        Example:
            server = KVUDPServer(port=4999)
            asyncio.run(server.start())
        """
        if self._running:
            return

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._transport, _ = await loop.create_datagram_endpoint(
            lambda: _DatagramQueue(self._queue),
            local_addr=(self.host, self.port),
        )
        self._running = True

        sockname = self._transport.get_extra_info('sockname')
        if sockname:
            self.port = sockname[1]
        logger.info(f"Serving on {sockname}")

        try:
            await self.serve()
        except asyncio.CancelledError:
            logger.debug("Server start cancelled")
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Close the datagram endpoint."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """Get server statistics."""
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "peer": self.peer,
            "total_requests": self.handler.total_requests,
            "store_stats": self.store.get_stats(),
        }

"""
Async TCP Server Module

This module implements the TCP half of the crc-kv server.

The server accepts exactly one client, stops listening, and then serves
an unbounded sequence of request/reply exchanges on that connection
until the client sends the quit sentinel.

Key asyncio concepts used:
- asyncio.start_server(): Create a TCP server
- StreamReader.readexactly(): Read a length-prefixed frame
- StreamWriter.write() / drain(): Send data to client
- asyncio.wait_for(): Bound the wait for each frame header
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import KVStore
from ..config.settings import settings
from ..protocol.checksum import encode
from ..protocol.commands import CLIENT_UNRESPONSIVE, REPLY_TOO_LARGE, Peer, format_peer
from .framing import FrameTooLargeError, pack_string, read_string
from .session import RequestHandler

logger = logging.getLogger(__name__)


class KVTCPServer:
    """
    Asynchronous single-session TCP server for crc-kv.

    Usage:
        server = KVTCPServer(host='0.0.0.0', port=4999)
        await server.start()  # Returns once the client quits

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 4999)
        timeout: Seconds to wait for each request before logging the
                 client as unresponsive
        store: The KVStore the session operates on
        handler: The RequestHandler shared with the UDP server
        peer: Address of the connected client, once accepted
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            timeout: float = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.RECEIVE_TIMEOUT
        self.handler = RequestHandler(store)
        self.store = self.handler.store
        self.peer: Optional[Peer] = None

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._writer: Optional[StreamWriter] = None
        self._connections: Optional[asyncio.Queue] = None
        self._accepted = False
        self._running = False

    async def _on_connect(self, reader: StreamReader, writer: StreamWriter) -> None:
        """Queue the first connection; refuse any that follow."""
        if self._accepted:
            addr = writer.get_extra_info('peername')
            logger.warning(f"Refusing connection from {addr}: a session is already active")
            writer.close()
            return

        self._accepted = True
        self._connections.put_nowait((reader, writer))

    async def handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        """
        Serve the single client session.

        Reads frames until the client sends the quit sentinel. A receive
        timeout between frames is logged and the server keeps waiting; a
        frame already under way is always read to its end. A connection
        closed by the client mid-session raises ConnectionClosedError.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self.peer = (addr[0], addr[1]) if addr else None
        self._writer = writer
        logger.info(f"Connection with {format_peer(self.peer)} established.")

        try:
            while True:
                try:
                    frame = await read_string(reader, timeout=self.timeout)
                except asyncio.TimeoutError:
                    logger.warning(CLIENT_UNRESPONSIVE)
                    continue

                reply, done = self.handler.handle(frame, self.peer)
                writer.write(self._frame_reply(reply))
                await writer.drain()

                if done:
                    break
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    def _frame_reply(self, reply: str) -> bytes:
        """Frame a reply, replacing one that does not fit with a fixed notice."""
        try:
            return pack_string(encode(reply))
        except FrameTooLargeError:
            logger.warning(f"Reply of {len(reply)} characters does not fit in a frame")
            return pack_string(encode(REPLY_TOO_LARGE))

    async def start(self) -> None:
        """
        Bind, wait for one client, and serve it until it quits.

        Example:
            server = KVTCPServer(port=4999)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._accepted = False
        self._connections = asyncio.Queue()
        self._server = await asyncio.start_server(self._on_connect, self.host, self.port)
        self._running = True

        sockets = self._server.sockets or []
        if sockets:
            self.port = sockets[0].getsockname()[1]
        addrs = ', '.join(str(sock.getsockname()) for sock in sockets)
        logger.info(f"Serving on {addrs}")

        try:
            reader, writer = await self._connections.get()
            # One client per server lifetime
            self._server.close()
            await self.handle_client(reader, writer)
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Close the client connection and the listening socket."""
        if self._writer is not None and not self._writer.is_closing():
            self._writer.close()

        if self._server is not None:
            self._server.close()
            try:
                await self._server.wait_closed()
            finally:
                self._server = None

        self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with the bind address, the connected peer,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "peer": self.peer,
            "total_requests": self.handler.total_requests,
            "store_stats": self.store.get_stats(),
        }

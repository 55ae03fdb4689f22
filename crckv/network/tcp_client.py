"""
TCP Client Module

Blocking client that connects once and reuses the connection for the
whole session.
"""

import logging
import socket

from ..config.settings import settings
from ..protocol.checksum import encode
from ..protocol.commands import SERVER_UNRESPONSIVE
from .framing import pack_string, recv_string
from .session import read_reply

logger = logging.getLogger(__name__)


class TCPClient:
    """Simple TCP client for crc-kv."""

    def __init__(self, host: str = None, port: int = None, timeout: float = None):
        self.host = host if host is not None else settings.CLIENT_HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.RECEIVE_TIMEOUT
        self.socket = None

    def connect(self) -> None:
        """
        Connect to the server.

        Raises:
            OSError: If the server cannot be reached.
        """
        self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
        logger.info(f"Connected to {self.host}:{self.port} over TCP")

    def disconnect(self) -> None:
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def send_packet(self, message: str) -> str:
        """Checksum-frame a message and send it."""
        self.socket.sendall(pack_string(encode(message)))
        logger.info(f"Request sent to server: {message}")
        return message

    def receive_data(self) -> str:
        """
        Wait for one reply.

        Returns:
            The reply payload, the malformed-reply text if its checksum
            fails, or the unresponsive text on timeout.

        Raises:
            ConnectionClosedError: If the server closes the connection.
        """
        try:
            frame = recv_string(self.socket)
        except socket.timeout:
            logger.warning(SERVER_UNRESPONSIVE)
            return SERVER_UNRESPONSIVE
        return read_reply(frame)

    def request(self, message: str) -> str:
        """Send a message and return the server's reply."""
        self.send_packet(message)
        return self.receive_data()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

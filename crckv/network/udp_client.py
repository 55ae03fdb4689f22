"""
UDP Client Module

Blocking client that sends one datagram per request and waits for one
datagram in reply.
"""

import logging
import socket

from ..config.settings import settings
from ..protocol.checksum import encode
from ..protocol.commands import SERVER_UNRESPONSIVE
from .session import read_reply

logger = logging.getLogger(__name__)


class UDPClient:
    """Simple UDP client for crc-kv."""

    def __init__(
            self,
            host: str = None,
            port: int = None,
            timeout: float = None,
            buffer_size: int = None,
    ):
        self.host = host if host is not None else settings.CLIENT_HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.RECEIVE_TIMEOUT
        self.buffer_size = buffer_size if buffer_size is not None else settings.UDP_REPLY_BUFFER_SIZE
        self.socket = None

    def connect(self) -> None:
        """Open the datagram socket. No packets are exchanged."""
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.socket.settimeout(self.timeout)
        logger.info(f"Sending to {self.host}:{self.port} over UDP")

    def disconnect(self) -> None:
        """Close the datagram socket."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def send_packet(self, message: str) -> str:
        """Checksum-frame a message and send it as one datagram."""
        self.socket.sendto(encode(message).encode("utf-8"), (self.host, self.port))
        logger.info(f"Request sent to server: {message}")
        return message

    def receive_data(self) -> str:
        """
        Wait for one reply datagram.

        Returns:
            The reply payload, the malformed-reply text if its checksum
            fails, or the unresponsive text on timeout.
        """
        try:
            data, _ = self.socket.recvfrom(self.buffer_size)
        except socket.timeout:
            logger.warning(SERVER_UNRESPONSIVE)
            return SERVER_UNRESPONSIVE
        return read_reply(data.decode("utf-8", errors="replace"))

    def request(self, message: str) -> str:
        """Send a message and return the server's reply."""
        self.send_packet(message)
        return self.receive_data()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

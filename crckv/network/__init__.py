"""Network module for crc-kv."""

from .framing import ConnectionClosedError, FrameTooLargeError
from .session import RequestHandler, read_reply
from .tcp_client import TCPClient
from .tcp_server import KVTCPServer
from .udp_client import UDPClient
from .udp_server import KVUDPServer

__all__ = [
    "ConnectionClosedError",
    "FrameTooLargeError",
    "KVTCPServer",
    "KVUDPServer",
    "RequestHandler",
    "TCPClient",
    "UDPClient",
    "read_reply",
]

"""
TCP String Framing

Each message on a TCP connection is an unsigned 16-bit big-endian byte
count followed by that many bytes of UTF-8 text.
"""

import asyncio
import socket
import struct
from typing import Optional

from ..config.settings import settings

LENGTH_PREFIX = struct.Struct(">H")


class FrameTooLargeError(ValueError):
    """Raised when a string does not fit in a single frame."""


class ConnectionClosedError(ConnectionError):
    """Raised when the peer closes the connection mid-frame."""


def pack_string(text: str) -> bytes:
    """
    Encode a string as a length-prefixed frame.

    Raises:
        FrameTooLargeError: If the encoded string exceeds 65535 bytes.
    """
    data = text.encode("utf-8")
    if len(data) > settings.MAX_FRAME_LENGTH:
        raise FrameTooLargeError(f"frame of {len(data)} bytes exceeds {settings.MAX_FRAME_LENGTH}")
    return LENGTH_PREFIX.pack(len(data)) + data


async def read_string(reader: asyncio.StreamReader, timeout: Optional[float] = None) -> str:
    """
    Read one length-prefixed string from an asyncio stream.

    The timeout bounds the wait for the length header only. Once a
    header has arrived the body is read to completion, so a slow sender
    never leaves the stream positioned mid-frame.

    Raises:
        asyncio.TimeoutError: If no header arrives within ``timeout``.
        ConnectionClosedError: If the stream ends before a full frame.
    """
    try:
        header = await asyncio.wait_for(reader.readexactly(LENGTH_PREFIX.size), timeout)
        (length,) = LENGTH_PREFIX.unpack(header)
        data = await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise ConnectionClosedError("connection closed by peer") from exc
    return data.decode("utf-8", errors="replace")


def recv_exactly(sock: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes from a blocking socket."""
    buf = b''
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            raise ConnectionClosedError("connection closed by peer")
        buf += chunk
    return buf


def recv_string(sock: socket.socket) -> str:
    """
    Read one length-prefixed string from a blocking socket.

    Raises:
        ConnectionClosedError: If the socket closes before a full frame.
        socket.timeout: If the socket's timeout expires.
    """
    (length,) = LENGTH_PREFIX.unpack(recv_exactly(sock, LENGTH_PREFIX.size))
    return recv_exactly(sock, length).decode("utf-8", errors="replace")

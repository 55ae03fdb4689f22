"""
Checksum Codec

Every message on the wire is framed as ``"<crc>:<payload>"`` where
``<crc>`` is the unsigned decimal CRC-32 of the UTF-8 encoded payload.
"""

import zlib
from typing import Tuple

SEPARATOR = ":"


class ProtocolError(ValueError):
    """Base class for frame-level protocol errors."""


class MalformedFrameError(ProtocolError):
    """Raised when a frame has no checksum header."""


class ChecksumMismatchError(ProtocolError):
    """Raised when a frame's checksum does not match its payload."""

    def __init__(self, checksum: str, payload: str):
        super().__init__(f"checksum {checksum!r} does not match payload of length {len(payload)}")
        self.checksum = checksum
        self.payload = payload


def calculate_checksum(payload: str) -> str:
    """
    Compute the CRC-32 of a payload.

    Examples:
        >>> calculate_checksum("a")
        '3904355907'
    """
    return str(zlib.crc32(payload.encode("utf-8")) & 0xFFFFFFFF)


def encode(payload: str) -> str:
    """Prefix a payload with its checksum header."""
    return f"{calculate_checksum(payload)}{SEPARATOR}{payload}"


def decode(frame: str) -> Tuple[str, str]:
    """
    Split a frame into ``(checksum, payload)``.

    Only the first separator is significant, so payloads may contain
    colons of their own.

    Raises:
        MalformedFrameError: If the frame has no separator.
    """
    parts = frame.split(SEPARATOR, 1)
    if len(parts) != 2:
        raise MalformedFrameError(f"no checksum header in frame of length {len(frame)}")
    return parts[0], parts[1]


def validate(checksum: str, payload: str) -> bool:
    """Check that ``checksum`` matches the recomputed checksum of ``payload``."""
    return calculate_checksum(payload) == checksum


def decode_verified(frame: str) -> str:
    """
    Decode a frame and return its payload only if the checksum matches.

    Raises:
        MalformedFrameError: If the frame has no separator.
        ChecksumMismatchError: If the checksum does not match.
    """
    checksum, payload = decode(frame)
    if not validate(checksum, payload):
        raise ChecksumMismatchError(checksum, payload)
    return payload

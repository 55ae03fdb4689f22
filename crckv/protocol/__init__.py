"""Protocol module for crc-kv."""

from .checksum import (
    ChecksumMismatchError,
    MalformedFrameError,
    ProtocolError,
    calculate_checksum,
    decode,
    decode_verified,
    encode,
    validate,
)
from .commands import Command, CommandType, is_quit
from .parser import ProtocolParser

__all__ = [
    "ChecksumMismatchError",
    "Command",
    "CommandType",
    "MalformedFrameError",
    "ProtocolError",
    "ProtocolParser",
    "calculate_checksum",
    "decode",
    "decode_verified",
    "encode",
    "is_quit",
    "validate",
]

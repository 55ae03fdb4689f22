"""
Protocol Command Definitions

This module defines the parsed command structure and the fixed reply
texts exchanged between client and server.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

# Fixed reply texts
MALFORMED_PACKET = "Datagram packet malformed."
MALFORMED_REPLY = "Packet received from server malformed."
SHUTDOWN_NOTICE = "Quit requested. Server shutting down."
KEY_NOT_FOUND = "No key found in data store."
KEY_REMOVED = "Key successfully removed from store."
KEY_DID_NOT_EXIST = "Key did not exist in store."
SERVER_UNRESPONSIVE = "Server unresponsive, timeout mechanism executed"
CLIENT_UNRESPONSIVE = "Client unresponsive, timeout mechanism executed"
REPLY_TOO_LARGE = "Reply too large to send in a single frame."

QUIT_SENTINEL = "q"

Peer = Tuple[str, int]


class CommandType(Enum):
    """Enumeration of supported command types."""
    PUT = auto()
    GET = auto()
    DELETE = auto()
    INVALID = auto()


# Number of comma-separated fields each verb takes
FIELD_COUNTS = {
    CommandType.PUT: 3,
    CommandType.GET: 2,
    CommandType.DELETE: 2,
}

VERBS = frozenset(t.name for t in FIELD_COUNTS)


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command (PUT, GET, DELETE, INVALID)
        verb: The verb as received, trimmed and upper-cased
        key: The lower-cased key (empty for INVALID)
        value: The lower-cased value for PUT (empty otherwise)
        raw: The payload as received
        reason: Why the payload was rejected (INVALID only)
        diagnostic: Log line describing the rejected request (INVALID only)
    """
    type: CommandType
    verb: str = ""
    key: str = ""
    value: str = ""
    raw: str = ""
    reason: str = ""
    diagnostic: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command is valid for its type."""
        if self.type == CommandType.INVALID:
            return False
        return self.verb in VERBS and bool(self.key)

    @classmethod
    def invalid(cls, raw: str, reason: str, diagnostic: str = "", verb: str = "") -> "Command":
        """Create an INVALID command."""
        return cls(type=CommandType.INVALID, verb=verb, raw=raw, reason=reason, diagnostic=diagnostic)


def is_quit(payload: str) -> bool:
    """Check whether a payload is the quit sentinel (case-insensitive)."""
    return payload.lower() == QUIT_SENTINEL


def format_peer(peer: Optional[Peer]) -> str:
    """Render a peer address for log lines."""
    if peer is None:
        return "unknown address"
    return f"address {peer[0]}, port {peer[1]}"


def added_message(key: str, value: str) -> str:
    return f"New value for key, {key}, added -> {value}"


def replaced_message(key: str, old: str, new: str) -> str:
    return f"Old Value, {old}, for key, {key}, replaced with new value, {new}."


def invalid_request_message(request: str, detail: str = "") -> str:
    if detail:
        return f"Received an invalid request, {request}: {detail}"
    return f"Received an invalid request, {request}"


def describe_request(text: str, limit: int) -> str:
    """Quote short text back as is; describe longer text by its length."""
    if len(text) <= limit:
        return text
    return f"request of length {len(text)}"

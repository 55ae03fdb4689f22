"""
Session Handling Shared by Both Transports

The TCP and UDP servers differ only in how bytes move. Everything that
happens to a frame once it has arrived lives here: checksum validation,
the quit sentinel, parsing, dispatch and framing of the reply. The
client-side counterpart, ``read_reply()``, is shared by both clients.
"""

import logging
from typing import Optional, Tuple

from ..cache.store import KVStore
from ..protocol.checksum import decode, validate, MalformedFrameError
from ..protocol.commands import (
    MALFORMED_PACKET,
    MALFORMED_REPLY,
    SHUTDOWN_NOTICE,
    CommandType,
    Peer,
    format_peer,
    is_quit,
)
from ..protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class RequestHandler:
    """
    Turns one inbound frame into one reply.

    Attributes:
        store: The KVStore requests are dispatched to
        parser: The ProtocolParser for parsing payloads
    """

    def __init__(self, store: KVStore = None, parser: ProtocolParser = None):
        self.store = store if store is not None else KVStore()
        self.parser = parser if parser is not None else ProtocolParser()
        self.total_requests = 0

    def handle(self, frame: str, peer: Optional[Peer] = None) -> Tuple[str, bool]:
        """
        Process a single inbound frame.

        Args:
            frame: The frame as received, checksum header included
            peer: Sender address for log lines

        Returns:
            ``(reply, quit)`` where ``reply`` is the unframed reply text and
            ``quit`` tells the caller to end the session after sending it.
        """
        self.total_requests += 1

        try:
            checksum, payload = decode(frame)
        except MalformedFrameError:
            logger.warning(f"No header available for packet from {format_peer(peer)}. Checksum not validated")
            return self._reply(MALFORMED_PACKET), False

        logger.info(f"Message received from {format_peer(peer)}: {payload}")

        if is_quit(payload):
            logger.info(SHUTDOWN_NOTICE)
            return self._reply(SHUTDOWN_NOTICE), True

        if not validate(checksum, payload):
            logger.warning(f"Checksum mismatch for request of length {len(payload)} from {format_peer(peer)}")
            return self._reply(MALFORMED_PACKET), False

        command = self.parser.parse_request(payload, peer)
        if command.type == CommandType.INVALID:
            logger.warning(f"{command.diagnostic} ({command.reason})")

        return self._reply(self.store.dispatch(command, peer)), False

    def _reply(self, result: str) -> str:
        logger.info(f"Sending to client: {result}")
        return result


def read_reply(frame: str) -> str:
    """
    Interpret a reply frame on the client side.

    Returns:
        The payload when its checksum is valid, otherwise the fixed
        malformed-reply text.
    """
    try:
        checksum, payload = decode(frame)
    except MalformedFrameError:
        logger.warning("No header available for packet. Checksum not validated")
        return MALFORMED_REPLY

    if not validate(checksum, payload):
        logger.warning(MALFORMED_REPLY)
        return MALFORMED_REPLY

    logger.info(f"Return message received from server: {payload}")
    return payload

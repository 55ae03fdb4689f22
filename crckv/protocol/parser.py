"""
Protocol Parser Module

This module turns a validated payload into a Command.

Request grammar (comma separated, whitespace around fields ignored):
    PUT, <key>, <value>
    GET, <key>
    DELETE, <key>
"""

from typing import List, Optional

from .commands import Command, CommandType, FIELD_COUNTS, Peer, describe_request, format_peer
from ..config.settings import settings


class ProtocolParser:
    """
    Parser for the crc-kv command grammar.

    Verbs are case-insensitive. Keys and values are lower-cased so that
    lookups are case-insensitive.

    Constraints:
        - PUT takes exactly 3 fields, GET and DELETE exactly 2
        - Keys must be non-empty; lengths are bounded only by the transport
        - Commas cannot be escaped; a value containing a comma changes
          the field count and is rejected
    """

    def parse_request(self, payload: str, peer: Optional[Peer] = None) -> Command:
        """
        Parse a payload into a Command object.

        Args:
            payload: Payload with the checksum header already removed
            peer: Sender address, used only in the diagnostic line

        Returns:
            Command object representing the parsed request.
            Returns Command with type=INVALID for malformed requests.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("put, Name, Dominic")
            >>> cmd.type == CommandType.PUT
            True
            >>> cmd.key, cmd.value
            ('name', 'dominic')
        """
        if "," not in payload:
            return self._reject(payload, "no comma", peer)

        fields = payload.split(",")
        verb = fields[0].strip().upper()

        if len(fields) == FIELD_COUNTS[CommandType.PUT]:
            if verb != CommandType.PUT.name:
                return self._reject(payload, f"unknown verb {self._name(verb)} for 3 fields", peer, verb)
            return self._parse_put(fields, payload, peer)

        if len(fields) == FIELD_COUNTS[CommandType.GET]:
            if verb not in (CommandType.GET.name, CommandType.DELETE.name):
                return self._reject(payload, f"unknown verb {self._name(verb)} for 2 fields", peer, verb)
            return self._parse_key_only(CommandType[verb], fields, payload, peer)

        return self._reject(payload, f"expected 2 or 3 fields, got {len(fields)}", peer, verb)

    def _parse_put(self, fields: List[str], raw: str, peer: Optional[Peer]) -> Command:
        """
        Parse a PUT command.

        Format: PUT, <key>, <value>
        """
        key = fields[1].strip().lower()
        value = fields[2].strip().lower()

        if not key:
            return self._reject(raw, "empty key", peer, "PUT")

        return Command(type=CommandType.PUT, verb="PUT", key=key, value=value, raw=raw)

    def _parse_key_only(
            self,
            command_type: CommandType,
            fields: List[str],
            raw: str,
            peer: Optional[Peer],
    ) -> Command:
        """
        Parse a GET or DELETE command.

        Format: GET, <key> | DELETE, <key>
        """
        key = fields[1].strip().lower()

        if not key:
            return self._reject(raw, "empty key", peer, command_type.name)

        return Command(type=command_type, verb=command_type.name, key=key, raw=raw)

    @staticmethod
    def _name(verb: str) -> str:
        return describe_request(verb, settings.MAX_ECHO_LENGTH)

    def _reject(
            self,
            raw: str,
            reason: str,
            peer: Optional[Peer],
            verb: str = "",
    ) -> Command:
        """Build an INVALID command; the caller logs the diagnostic."""
        diagnostic = f"Received malformed request of length {len(raw)} from {format_peer(peer)}"
        return Command.invalid(raw, reason, diagnostic=diagnostic, verb=verb)

"""
Key-Value Store Module

This module implements the in-memory key-value store and the dispatch
of parsed commands onto it. Every operation answers with a
human-readable result string that is sent back to the client as is.
"""

import logging
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..protocol.commands import (
    KEY_DID_NOT_EXIST,
    KEY_NOT_FOUND,
    KEY_REMOVED,
    VERBS,
    Command,
    CommandType,
    Peer,
    added_message,
    describe_request,
    format_peer,
    invalid_request_message,
    replaced_message,
)

logger = logging.getLogger(__name__)


class KVStore:
    """
    In-memory key-value store.

    Keys are lower-cased on every operation, so lookups are
    case-insensitive. Values are stored as given.

    The store is touched by a single session loop only and needs no
    locking.
    """

    def __init__(self):
        """Initialize an empty store."""
        self._store: Dict[str, str] = {}
        self._operations = 0

    def put(self, key: str, value: str, peer: Optional[Peer] = None) -> str:
        """
        Insert or replace a key-value pair.

        Args:
            key: The key to store
            value: The value to associate with the key
            peer: Sender address for the request log line

        Returns:
            A message announcing the add, or the replaced and new value.
        """
        key = key.lower()
        self._operations += 1
        logger.info(f"Received PUT request for key {key} from {format_peer(peer)}.")

        if key not in self._store:
            self._store[key] = value
            result = added_message(key, value)
        else:
            old = self._store[key]
            self._store[key] = value
            result = replaced_message(key, old, value)

        logger.info(f"Response: {result}")
        return result

    def get(self, key: str, peer: Optional[Peer] = None) -> str:
        """
        Retrieve the value for a given key.

        Returns:
            The stored value, or a fixed not-found message.
        """
        key = key.lower()
        self._operations += 1
        logger.info(f"Received GET request for key {key} from {format_peer(peer)}.")

        if key in self._store:
            value = self._store[key]
            logger.info(f"Response: {value} returned for key {key}.")
            return value

        logger.info(f"Response: No key, {key}, found in data store.")
        return KEY_NOT_FOUND

    def delete(self, key: str, peer: Optional[Peer] = None) -> str:
        """
        Delete a key-value pair.

        Returns:
            A success message, or a fixed message if the key was absent.
        """
        key = key.lower()
        self._operations += 1
        logger.info(f"Received DELETE request for key {key} from {format_peer(peer)}.")

        if self._store.pop(key, None) is not None:
            logger.info(f"Response: Key, {key}, successfully removed from store.")
            return KEY_REMOVED

        logger.info(f"Response: Key, {key}, did not exist in store.")
        return KEY_DID_NOT_EXIST

    def dispatch(self, command: Command, peer: Optional[Peer] = None) -> str:
        """
        Execute a parsed command on the store.

        The verb is checked once more here so that a command built
        outside the parser cannot reach the store with an unknown verb.

        Args:
            command: The Command object to execute
            peer: Sender address for log lines and the invalid-request message

        Returns:
            The result string to send back to the client.
        """
        if command.type == CommandType.INVALID:
            return invalid_request_message(self._echo(command.verb or command.raw), command.reason)

        if command.verb.upper() not in VERBS:
            logger.warning(f"Received an invalid request, {command.verb}, from {format_peer(peer)}")
            return invalid_request_message(command.verb, f"from {format_peer(peer)}")

        if command.type == CommandType.PUT:
            return self.put(command.key, command.value, peer)
        if command.type == CommandType.GET:
            return self.get(command.key, peer)
        if command.type == CommandType.DELETE:
            return self.delete(command.key, peer)

        return invalid_request_message(command.verb, "unsupported command")

    @staticmethod
    def _echo(text: str) -> str:
        return describe_request(text, settings.MAX_ECHO_LENGTH)

    def exists(self, key: str) -> bool:
        """Check if a key exists."""
        return key.lower() in self._store

    def size(self) -> int:
        """Get the current number of keys in the store."""
        return len(self._store)

    def clear(self) -> None:
        """Remove all keys from the store."""
        self._store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Keys currently stored
            - operations: PUT/GET/DELETE calls served
        """
        return {
            "total_keys": len(self._store),
            "operations": self._operations,
        }

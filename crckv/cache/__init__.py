"""Cache module for crc-kv."""

from .store import KVStore

__all__ = ["KVStore"]

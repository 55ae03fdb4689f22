"""
crc-kv: Checksummed Key-Value Store

A small in-memory key-value store served over TCP or UDP. Every message
on the wire carries a CRC-32 checksum header, and one client talks to
one server process at a time.
"""

__version__ = "1.0.0"

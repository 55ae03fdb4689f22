"""Configuration module for crc-kv."""

from .logs import setup_logging
from .settings import Settings, settings

__all__ = ["Settings", "settings", "setup_logging"]

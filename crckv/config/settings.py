"""
crc-kv Configuration Settings

This module contains all configuration constants for the crc-kv server
and client. Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server and client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("CRCKV_HOST", "0.0.0.0")
    CLIENT_HOST: str = os.environ.get("CRCKV_CLIENT_HOST", "localhost")
    PORT: int = int(os.environ.get("CRCKV_PORT", "4999"))
    TRANSPORT: str = os.environ.get("CRCKV_TRANSPORT", "tcp")

    # Receive settings
    RECEIVE_TIMEOUT: float = float(os.environ.get("CRCKV_TIMEOUT", "15"))
    UDP_BUFFER_SIZE: int = 1024
    UDP_REPLY_BUFFER_SIZE: int = 65535  # replies may exceed the request buffer
    MAX_FRAME_LENGTH: int = 65535  # unsigned 16-bit length prefix on TCP

    # Message constraints
    MAX_MESSAGE_LENGTH: int = 80  # interactive client input
    MAX_ECHO_LENGTH: int = 80  # longest payload quoted back in an invalid-request reply

    # Logging settings
    SERVER_LOG_FILE: str = os.environ.get("CRCKV_SERVER_LOG", "server.log")
    CLIENT_LOG_FILE: str = os.environ.get("CRCKV_CLIENT_LOG", "client.log")
    DEBUG: bool = os.environ.get("CRCKV_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("CRCKV_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()

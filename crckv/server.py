#!/usr/bin/env python3
"""
crc-kv Server Entry Point

This is the main entry point for starting the crc-kv server.

Usage:
    python -m crckv.server                     # TCP on 0.0.0.0:4999
    python -m crckv.server 5000                # Custom port
    python -m crckv.server --transport udp     # Serve over UDP
    python -m crckv.server --debug             # Enable debug logging

Environment Variables:
    CRCKV_HOST        - Server bind address
    CRCKV_PORT        - Server port
    CRCKV_TRANSPORT   - tcp or udp
    CRCKV_TIMEOUT     - Receive timeout in seconds
    CRCKV_SERVER_LOG  - Log file path
    CRCKV_DEBUG       - Enable debug mode (true/false)
"""

import argparse
import asyncio
import logging
import sys
from typing import List

from .cache.store import KVStore
from .config.logs import setup_logging
from .config.settings import settings
from .network.tcp_server import KVTCPServer
from .network.udp_server import KVUDPServer

logger = logging.getLogger(__name__)

TRANSPORTS = {
    "tcp": KVTCPServer,
    "udp": KVUDPServer,
}


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="crc-kv: checksummed key-value store server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "positional",
        nargs="*",
        metavar="port",
        help="Port number to listen on",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--transport",
        choices=sorted(TRANSPORTS),
        default=settings.TRANSPORT,
        help="Transport to serve over",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.RECEIVE_TIMEOUT,
        help="Seconds to wait for each request",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=settings.SERVER_LOG_FILE,
        help="File to append log lines to",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def resolve_port(values: List[str]) -> int:
    """
    Pick the port from positional arguments.

    Anything other than a single integer falls back to the default port
    with a warning.
    """
    if not values:
        return settings.PORT

    if len(values) == 1:
        try:
            return int(values[0])
        except ValueError:
            logger.warning(f"Invalid port {values[0]!r}. Default port {settings.PORT} used.")
            return settings.PORT

    logger.warning(f"Invalid number of args inputted. Default port {settings.PORT} used.")
    return settings.PORT


def main(argv: List[str] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    # Setup logging
    setup_logging(log_file=args.log_file, debug=args.debug)

    port = resolve_port(args.positional)
    server_class = TRANSPORTS[args.transport]
    server = server_class(
        host=args.host,
        port=port,
        store=KVStore(),
        timeout=args.timeout,
    )

    # Log startup info
    logger.info("Starting crc-kv server")
    logger.info(f"  Transport: {args.transport}")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {port}")
    logger.info(f"  Timeout: {args.timeout}")

    # Run the server
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except (ConnectionError, OSError) as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()

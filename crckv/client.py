#!/usr/bin/env python3
"""
crc-kv Interactive Client

Usage:
    python -m crckv.client                        # TCP to localhost:4999
    python -m crckv.client 5000                   # Custom port
    python -m crckv.client 10.0.0.2 5000          # Custom host and port
    python -m crckv.client --transport udp        # Talk over UDP
    python -m crckv.client --demo                 # Run the batch demo first

Requests:
    put, <key>, <value>     Store a key-value pair
    get, <key>              Retrieve a value
    delete, <key>           Delete a key
    q                       Stop the client and the server
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Tuple, Union

from .config.logs import setup_logging
from .config.settings import settings
from .network.tcp_client import TCPClient
from .network.udp_client import UDPClient
from .protocol.commands import is_quit

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

logger = logging.getLogger(__name__)

Client = Union[TCPClient, UDPClient]

TRANSPORTS = {
    "tcp": TCPClient,
    "udp": UDPClient,
}

# Sent once by prepopulate()
PREPOPULATE_REQUESTS = [
    "put, class, CS6650",
    "put, semester, Spring2024",
    "put, professor, Saripalli",
    "put, program, MSCS",
    "put, university, Northeastern",
]

# Swept with PUT, GET and DELETE by sweep()
SEED_DATA: Dict[str, str] = {
    "name": "dominic",
    "job": "analyst",
    "industry": "ecommerce",
    "location": "boston",
    "degree": "CS",
}


def collect_input(
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
) -> str:
    """
    Prompt until the user enters a message of 1 to 80 characters.

    Blank messages and messages over the limit are rejected and the
    user is asked again.
    """
    limit = settings.MAX_MESSAGE_LENGTH
    message = read("Enter message to send to server. Type 'q' to quit: ")
    while len(message) > limit or not message.strip():
        write(f"Please keep message between 1 and {limit} characters.")
        message = read("Enter a new message to send to server: ")
    return message


def communicate(
        client: Client,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
) -> None:
    """Send user messages and print replies until the user sends 'q'."""
    while True:
        message = client.send_packet(collect_input(read, write))
        result = client.receive_data()
        write(f"Result-> {result}")

        if is_quit(message):
            break


def prepopulate(client: Client) -> List[str]:
    """Send the fixed PUT requests, returning the replies."""
    results = []
    for request in PREPOPULATE_REQUESTS:
        try:
            results.append(client.request(request))
        except OSError as e:
            logger.error(f"Unable to send pre-populated data: {e}")
    return results


def sweep(client: Client, seed: Dict[str, str] = None) -> List[Tuple[str, str]]:
    """
    Run PUT, GET and DELETE for every seed key.

    Returns:
        ``(request, reply)`` pairs in the order they were sent.
    """
    seed = seed if seed is not None else SEED_DATA
    exchanges = []
    for key, value in seed.items():
        for request in (f"put, {key}, {value}", f"get, {key}", f"delete, {key}"):
            try:
                exchanges.append((request, client.request(request)))
            except OSError as e:
                logger.error(f"Unable to send request {request!r}: {e}")
    return exchanges


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive client for crc-kv",
    )
    parser.add_argument(
        "positional",
        nargs="*",
        metavar="host/port",
        help="[host] port of the server (default: localhost 4999)",
    )
    parser.add_argument(
        "--transport",
        choices=sorted(TRANSPORTS),
        default=settings.TRANSPORT,
        help="Transport to use (default: tcp)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.RECEIVE_TIMEOUT,
        help="Seconds to wait for each reply (default: 15)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=settings.CLIENT_LOG_FILE,
        help="File to append log lines to (default: client.log)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Pre-populate the server and run a PUT/GET/DELETE sweep first",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def resolve_address(values: List[str]) -> Tuple[str, int]:
    """
    Pick host and port from positional arguments.

    One value is the port, two are host and port. Anything else falls
    back to the defaults with a warning.
    """
    host, port = settings.CLIENT_HOST, settings.PORT

    if not values:
        return host, port

    if len(values) > 2:
        logger.warning(f"Unknown number of args entered. {host}:{port} used.")
        print(f"Unknown number of args entered. {host}:{port} used.")
        return host, port

    try:
        new_port = int(values[-1])
    except ValueError:
        logger.warning(f"Invalid port {values[-1]!r}. {host}:{port} used.")
        print(f"Invalid port {values[-1]!r}. {host}:{port} used.")
        return host, port

    if len(values) == 2:
        host = values[0]
    return host, new_port


def main(argv: List[str] = None) -> None:
    args = parse_args(argv)
    setup_logging(log_file=args.log_file, debug=args.debug, console=False)

    host, port = resolve_address(args.positional)
    client = TRANSPORTS[args.transport](host, port, timeout=args.timeout)

    print(f"crc-kv Client")
    print(f"=============")
    print(f"Connecting to {host}:{port} over {args.transport.upper()}...")

    try:
        client.connect()
    except OSError as e:
        print(f"Connection error: {e}")
        print("Failed to connect. Is the server running?")
        print(f"  Try: python -m crckv.server --transport {args.transport} {port}")
        sys.exit(1)

    try:
        if args.demo:
            for result in prepopulate(client):
                print(result)
            for request, result in sweep(client):
                print(f"{request} -> {result}")

        communicate(client)

    except (EOFError, KeyboardInterrupt):
        print("\nGoodbye!")
    except ConnectionError as e:
        logger.error(f"Connection lost: {e}")
        print(f"Connection lost: {e}")
        sys.exit(1)
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()

"""Logging setup shared by the server and client entry points."""

import logging
import sys
from typing import Optional

from .settings import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
        log_file: Optional[str] = None,
        debug: bool = False,
        console: bool = True,
) -> None:
    """
    Configure the root logger.

    Args:
        log_file: Path of the append-only log file (None disables it)
        debug: Enable DEBUG level output
        console: Also echo log records to stdout
    """
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handlers = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers or [logging.NullHandler()],
        force=True,
    )

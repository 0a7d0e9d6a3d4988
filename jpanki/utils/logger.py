"""Logging setup shared by the CLI scripts and the HTTP server."""

import logging
from typing import Optional

from ..config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Chatty third-party loggers
_NOISY_LOGGERS = ("aiohttp", "botocore", "boto3", "urllib3", "uvicorn.access")


def setup_logger(level: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging once and return the package logger.

    Args:
        level: Log level name (defaults to Config.LOG_LEVEL)

    Returns:
        The "jpanki" logger
    """
    level_name = (level or Config.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    # Silence noisy libraries
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger("jpanki")

#!/usr/bin/env python
import logging
import sys
from typing import Any, Union

LOGGER_NAME = "electionguard_verify"
LOG_FORMAT = "[%(process)d:%(asctime)s]:%(levelname)s:%(message)s"

_logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: Union[int, str] = logging.WARNING) -> None:
    """
    Send verifier logs to stderr at the given level. Stdout is left to the report.
    """
    if isinstance(level, str):
        level = level.upper()
    _logger.setLevel(level)
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)


def log_debug(message: str, *args: Any) -> None:
    _logger.debug(message, *args)


def log_info(message: str, *args: Any) -> None:
    _logger.info(message, *args)


def log_warning(message: str, *args: Any) -> None:
    _logger.warning(message, *args)


def log_error(message: str, *args: Any) -> None:
    _logger.error(message, *args)

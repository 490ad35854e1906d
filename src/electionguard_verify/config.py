#!/usr/bin/env python
from os import environ

WORKERS_ENV = "EG_VERIFY_WORKERS"
LOG_LEVEL_ENV = "EG_VERIFY_LOG_LEVEL"

DEFAULT_WORKERS = 1
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_worker_count() -> int:
    """
    Number of worker processes used to verify ballots; 1 means no pool.
    """
    value = environ.get(WORKERS_ENV, "")
    if not value:
        return DEFAULT_WORKERS
    try:
        workers = int(value)
    except ValueError as error:
        raise ValueError(f"{WORKERS_ENV} must be an integer, got {value!r}") from error
    if workers < 1:
        raise ValueError(f"{WORKERS_ENV} must be at least 1, got {workers}")
    return workers


def get_log_level() -> str:
    level = environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        choices = ", ".join(LOG_LEVELS)
        raise ValueError(f"{LOG_LEVEL_ENV} must be one of {choices}, got {level!r}")
    return level

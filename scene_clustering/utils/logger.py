"""Utilities for logging.

Every module obtains the shared logger through `get_logger()`. Records carry a `worker_id` field so that
messages emitted while subtrees are built on Dask workers can be told apart from the main process.
"""

import logging
import socket
import sys
from datetime import datetime, timezone
from logging import LoggerAdapter

from dask import distributed

LOGGER_NAME = "scene-clustering"

# Set once per process on the first log call; Dask worker context is not available at import time.
_WORKER_ID_CACHE: str | None = None


def _detect_worker_id() -> str:
    """Return "hostname:port" inside a Dask worker, "hostname-main" otherwise."""
    hostname = socket.gethostname()
    try:
        worker = distributed.get_worker()
    except (ImportError, ValueError, AttributeError):
        return f"{hostname}-main"
    # Worker address looks like "tcp://130.207.121.32:40665".
    port = worker.address.split(":")[-1]
    return f"{hostname}:{port}"


def get_worker_id() -> str:
    """Get the cached worker ID for the current process."""
    global _WORKER_ID_CACHE

    if _WORKER_ID_CACHE is None:
        _WORKER_ID_CACHE = _detect_worker_id()
    return _WORKER_ID_CACHE


class WorkerAwareAdapter(LoggerAdapter):
    """LoggerAdapter that injects the worker ID into every LogRecord as the `worker_id` extra field."""

    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger, {})

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra["worker_id"] = get_worker_id()
        return msg, kwargs


class UTCFormatter(logging.Formatter):
    """Formatter with UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")


def get_logger() -> LoggerAdapter:
    """Get the package logger.

    Log format:
        "2025-10-28 00:00:45 [hornet-main] [scene_clustering.py] INFO: message"
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        fmt = "%(asctime)s [%(worker_id)s] [%(filename)s] %(levelname)s: %(message)s"
        handler.setFormatter(UTCFormatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    return WorkerAwareAdapter(logger)

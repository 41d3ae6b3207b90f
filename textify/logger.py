"""Logging utilities for textify."""

import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, MutableMapping, Optional

# Context variable carrying the id of the extraction currently running
extraction_id_var: ContextVar[Optional[str]] = ContextVar("extraction_id", default=None)


class ContextLogger(logging.LoggerAdapter):
    """Adapter rendering an ``extra_data`` mapping as trailing key=value pairs.

    The id bound by ``extraction_context`` is appended to every record
    emitted while an extraction runs.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = dict(kwargs.pop("extra_data", None) or {})
        extraction_id = extraction_id_var.get()
        if extraction_id:
            fields["extraction_id"] = extraction_id
        if fields:
            msg = f"{msg} [" + ", ".join(f"{k}={v}" for k, v in fields.items()) + "]"
        return msg, kwargs


def setup_logging(log_level: str = "INFO"):
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger instance."""
    return ContextLogger(logging.getLogger(name))


@contextmanager
def extraction_context(extraction_id: Optional[str] = None) -> Iterator[str]:
    """Bind an extraction id to log records emitted inside the block.

    Args:
        extraction_id: Optional id. A new UUID is generated when omitted.

    Yields:
        The id that was bound
    """
    if extraction_id is None:
        extraction_id = str(uuid.uuid4())
    token = extraction_id_var.set(extraction_id)
    try:
        yield extraction_id
    finally:
        extraction_id_var.reset(token)


class Timer:
    """Context manager for timing operations."""

    def __init__(self, name: str):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.monotonic()
        return self

    def __exit__(self, *args):
        if self.start_time is not None:
            self.elapsed_ms = int((time.monotonic() - self.start_time) * 1000)

    def get_elapsed_ms(self) -> int:
        """Get elapsed time in milliseconds."""
        if self.elapsed_ms is not None:
            return self.elapsed_ms
        if self.start_time is not None:
            return int((time.monotonic() - self.start_time) * 1000)
        return 0

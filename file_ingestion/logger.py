"""Structured logging helpers for file ingestion."""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional

# Batch ID shared by every log record emitted while a batch is processed
batch_id_var: ContextVar[Optional[str]] = ContextVar("batch_id", default=None)


class ContextLogger:
    """Logger wrapper that renders structured fields as ``[key=value]`` suffixes.

    Fields passed to :meth:`bind` are attached to every record, call-site
    ``extra_data`` wins on conflicts.
    """

    def __init__(self, logger: logging.Logger, fields: Optional[dict[str, Any]] = None):
        self.logger = logger
        self.fields = dict(fields or {})

    def bind(self, **fields: Any) -> "ContextLogger":
        """Return a logger that adds ``fields`` to every record."""
        return ContextLogger(self.logger, {**self.fields, **fields})

    @staticmethod
    def _format_extra_data(extra_data: dict[str, Any]) -> str:
        if not extra_data:
            return ""
        parts = [f"{k}={v}" for k, v in extra_data.items()]
        return " [" + ", ".join(parts) + "]"

    def _log(self, level: int, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        if not self.logger.isEnabledFor(level):
            return

        data = {**self.fields, **(extra_data or {})}
        batch_id = batch_id_var.get()
        if batch_id:
            data["batch_id"] = batch_id

        # stacklevel=3 attributes the record to the caller, not this wrapper
        kwargs.setdefault("stacklevel", 3)
        self.logger.log(level, msg + self._format_extra_data(data), **kwargs)

    def debug(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.DEBUG, msg, extra_data, **kwargs)

    def info(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.INFO, msg, extra_data, **kwargs)

    def warning(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.WARNING, msg, extra_data, **kwargs)

    def error(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        self._log(logging.ERROR, msg, extra_data, **kwargs)


def setup_logging(log_level: str = "INFO") -> None:
    """Configure console logging for the ingestion CLI.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps stdout free for CLI output
    handler = logging.StreamHandler(sys.stderr)
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
    """Get a structured logger for ``name`` (typically ``__name__``)."""
    return ContextLogger(logging.getLogger(name))


def new_batch_id() -> str:
    """Generate a short batch ID for log correlation."""
    return uuid.uuid4().hex[:12]


class Timer:
    """Context manager measuring the wall time of a pipeline stage."""

    def __init__(self, name: str):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        if self.start_time is not None:
            self.elapsed_ms = int((time.perf_counter() - self.start_time) * 1000)

    def get_elapsed_ms(self) -> int:
        """Elapsed milliseconds, live while the block is still running."""
        if self.elapsed_ms is not None:
            return self.elapsed_ms
        if self.start_time is not None:
            return int((time.perf_counter() - self.start_time) * 1000)
        return 0

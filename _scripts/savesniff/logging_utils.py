"""
SaveSniff Structured Logging

Every module logs through `logging.getLogger(__name__)`; this module only
shapes the output. Each detected file carries its own trace id, so
interleaved detections can be told apart, and JSON lines can go to
stderr or a file alongside the text console.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

import logging
import sys
import time
import json
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
from contextvars import ContextVar

# Context variable for trace tracking
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")

PACKAGE_LOGGER = "savesniff"

# Extra record attributes carried into structured output
EXTRA_FIELDS = ("duration_ms", "recognizer", "kind", "size", "hint", "path")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs structured log entries.

    In JSON mode, outputs machine-readable JSON.
    In text mode, outputs human-readable logs with context.
    """

    def __init__(self, json_output: bool = False):
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        trace_id = trace_id_var.get()

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if trace_id:
            log_data["trace_id"] = trace_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if self.json_output:
            return json.dumps(log_data)

        parts = [
            f"[{log_data['timestamp']}]",
            f"[{record.levelname:8}]",
        ]

        if trace_id:
            parts.append(f"[{trace_id[:8]}]")

        parts.append(record.getMessage())

        extras = []
        for key in ("duration_ms", "recognizer", "kind", "size"):
            if hasattr(record, key):
                extras.append(f"{key}={getattr(record, key)}")

        if extras:
            parts.append(f"({', '.join(extras)})")

        result = " ".join(parts)

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the savesniff package logger.

    Only the package logger is touched, so an embedding application keeps
    its own root handlers. Calling it again replaces earlier handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, stderr gets JSON lines instead of text
        log_file: Optional file that receives JSON lines as well

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter(json_output=json_output))
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter(json_output=True))
        package_logger.addHandler(file_handler)

    return package_logger


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Set or generate trace ID for current context."""
    if trace_id is None:
        trace_id = str(uuid4())
    trace_id_var.set(trace_id)
    return trace_id


def get_trace_id() -> str:
    """Get current trace ID."""
    return trace_id_var.get()


class Timer:
    """
    Context manager for timing code blocks.

    Usage:
        with Timer(logger, "detect 4096 bytes"):
            detector.detect_from_bytes(data)
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type:
            self.logger.log(
                logging.ERROR,
                f"Operation failed: {self.operation}",
                extra={"duration_ms": round(self.duration_ms, 2)}
            )
        else:
            self.logger.log(
                self.level,
                f"Operation completed: {self.operation}",
                extra={"duration_ms": round(self.duration_ms, 2)}
            )

        return False  # Don't suppress exceptions


__all__ = [
    "PACKAGE_LOGGER",
    "setup_logging",
    "set_trace_id",
    "get_trace_id",
    "Timer",
    "StructuredFormatter",
]

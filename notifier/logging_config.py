"""
Structured JSON logging for the notification API.

Provides a single-line JSON formatter for production, a readable format for
local development, and a context manager that times calls to the remote
grammar service.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import UTC, datetime

# Extra fields copied from log records into the JSON payload
EXTRA_FIELDS = (
    "event",
    "duration_ms",
    "provider",
    "operation",
    "path",
    "status_code",
    "changed",
    "cache_size",
    "suggestions",
)


# -----------------------------------------------------------------------------
# JSON Formatter
# -----------------------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Output format:
    {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, ensure_ascii=False)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """
    Configure root logging.

    Args:
        json_format: If True, use JSON format. If False, use human-readable format.
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Context Managers
# -----------------------------------------------------------------------------


@contextmanager
def log_remote_call(provider: str, operation: str):
    """
    Context manager for remote service instrumentation.

    Logs call completion or failure with timing. The caller may record
    extra numbers in the yielded dict.

    Usage:
        with log_remote_call("languagetool", "check") as metrics:
            response = await client.post(...)
            metrics["suggestions"] = len(matches)
    """
    start_time = time.time()
    logger = logging.getLogger("notifier.remote")
    metrics: dict = {"suggestions": 0}

    try:
        yield metrics

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Remote call completed: {provider}/{operation} ({duration_ms}ms)",
            extra={
                "event": "remote_call_complete",
                "provider": provider,
                "operation": operation,
                "duration_ms": duration_ms,
                "suggestions": metrics["suggestions"],
            },
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.warning(
            f"Remote call failed: {provider}/{operation} - {e}",
            extra={
                "event": "remote_call_failed",
                "provider": provider,
                "operation": operation,
                "duration_ms": duration_ms,
            },
        )
        raise

r"""Structured logging utilities for machine-readable log output.

The JSON formatter is opt-in: attach it to a handler of the
``keystonenet`` logger.

Example:
    ```python
    import logging
    from keystonenet.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("keystonenet")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag every attempt issued in the current context with one request ID:

    ```python
    from keystonenet.utils.structured_logging import clear_request_id, set_request_id

    set_request_id("checkout-42")
    try:
        outcome = await runner.execute(Attempt("GET", "/cart"))
    finally:
        clear_request_id()
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_request_id",
    "get_request_id",
    "log_structured",
    "set_request_id",
]

import contextvars
import json
import logging
import time
from typing import Any

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "keystonenet_request_id", default=None
)

# Attributes every LogRecord carries. Anything else came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    {
        "args",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def get_request_id() -> str | None:
    """Get the request ID of the current context.

    Example:
        ```pycon
        >>> from keystonenet.utils.structured_logging import get_request_id, set_request_id
        >>> get_request_id()
        >>> set_request_id("req-123")
        >>> get_request_id()
        'req-123'

        ```
    """
    return _request_id.get()


def set_request_id(request_id: str) -> None:
    """Set the request ID of the current context.

    Attempts logged by the ``LoggingInterceptor`` in this context reuse it
    instead of generating their own. The value lives in a context variable,
    so concurrent tasks do not see each other's IDs.
    """
    _request_id.set(request_id)


def clear_request_id() -> None:
    _request_id.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Every record becomes one JSON object with the fields ``timestamp``
    (ISO 8601, UTC), ``level``, ``logger``, ``message``, ``module``,
    ``function`` and ``line``, the context request ID when set, the
    formatted exception when present, and every field passed through
    ``extra``. Values that are not JSON serializable are rendered with
    ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from keystonenet.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("keystonenet.doctest")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Response received", extra={"status_code": 200})
        >>> record = json.loads(stream.getvalue())
        >>> record["message"], record["status_code"]
        ('Response received', 200)

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        request_id = get_request_id()
        if request_id is not None:
            log_data["request_id"] = request_id
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_data[key] = value
        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format the record time as ISO 8601 with millisecond precision.

        ``datefmt`` is ignored.
        """
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log ``message`` with ``extra`` as structured fields.

    Example:
        ```pycon
        >>> import logging
        >>> from keystonenet.utils.structured_logging import log_structured
        >>> log_structured(logging.getLogger("keystonenet"), logging.DEBUG, "Retrying", delay=1.0)

        ```
    """
    logger.log(level, message, extra=extra)

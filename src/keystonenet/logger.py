r"""Request/response logging with redaction of sensitive values.

Example:
    ```python
    import logging
    from keystonenet.logger import LoggingInterceptor, LogLevel

    logging.basicConfig(level=logging.INFO)
    interceptor = LoggingInterceptor(level=LogLevel.HEADERS)
    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_REDACTED_FIELDS",
    "DEFAULT_REDACTED_HEADERS",
    "REDACTED",
    "LogLevel",
    "LoggingInterceptor",
    "redact_data",
    "redact_headers",
]

import logging
import uuid
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from keystonenet.attempt import REQUEST_ID
from keystonenet.transport import Interceptor
from keystonenet.utils.response import decode_payload
from keystonenet.utils.structured_logging import get_request_id, log_structured

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    import httpx

    from keystonenet.attempt import Attempt
    from keystonenet.exceptions import TransportError
    from keystonenet.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"

DEFAULT_REDACTED_HEADERS: tuple[str, ...] = ("authorization", "cookie", "x-api-key", "api-key")
DEFAULT_REDACTED_FIELDS: tuple[str, ...] = (
    "password",
    "token",
    "access_token",
    "refresh_token",
    "ssn",
    "credit_card",
    "cvv",
)


class LogLevel(IntEnum):
    """Verbosity of the ``LoggingInterceptor``. Each level includes the
    previous one."""

    NONE = 0
    BASIC = 1
    HEADERS = 2
    BODY = 3

    @property
    def includes_headers(self) -> bool:
        return self >= LogLevel.HEADERS

    @property
    def includes_body(self) -> bool:
        return self >= LogLevel.BODY


def redact_headers(headers: Mapping[str, str], names: Iterable[str]) -> dict[str, str]:
    """Return a copy of ``headers`` with the values of ``names`` masked.

    Header names are compared case-insensitively.

    Example:
        ```pycon
        >>> from keystonenet.logger import redact_headers
        >>> redact_headers({"Authorization": "Bearer abc", "Accept": "*/*"}, ["authorization"])
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}

        ```
    """
    lowered = {name.lower() for name in names}
    return {key: REDACTED if key.lower() in lowered else value for key, value in headers.items()}


def redact_data(data: Any, fields: Iterable[str]) -> Any:
    """Mask the values of ``fields`` in a decoded JSON payload.

    Nested mappings and lists are walked recursively. Field names are
    compared case-insensitively. Other values are returned unchanged.

    Example:
        ```pycon
        >>> from keystonenet.logger import redact_data
        >>> redact_data({"user": {"name": "ada", "Password": "x"}, "ids": [1]}, ["password"])
        {'user': {'name': 'ada', 'Password': '***REDACTED***'}, 'ids': [1]}

        ```
    """
    lowered = {field.lower() for field in fields}
    return _redact(data, lowered)


def _redact(data: Any, fields: set[str]) -> Any:
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in fields else _redact(value, fields)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_redact(item, fields) for item in data]
    return data


def _new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class LoggingInterceptor(Interceptor):
    r"""Log every attempt, its response and its failure.

    Each attempt gets a request ID, reused across its retries and replays:
    the one already in ``attempt.extra``, else the context one set with
    ``set_request_id``, else a generated one. Records carry ``request_id``,
    ``method`` and ``url`` as structured fields.

    Args:
        level: The verbosity.
        redacted_headers: Header names whose values are masked.
        redacted_fields: Body field names whose values are masked.
        log_level: The ``logging`` level of the records.

    Example:
        ```pycon
        >>> from keystonenet.logger import LoggingInterceptor, LogLevel
        >>> interceptor = LoggingInterceptor(level=LogLevel.BASIC)
        >>> interceptor.level
        <LogLevel.BASIC: 1>

        ```
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.BODY,
        *,
        redacted_headers: Iterable[str] = DEFAULT_REDACTED_HEADERS,
        redacted_fields: Iterable[str] = DEFAULT_REDACTED_FIELDS,
        log_level: int = logging.INFO,
    ) -> None:
        self.level = LogLevel(level)
        self.redacted_headers = tuple(redacted_headers)
        self.redacted_fields = tuple(redacted_fields)
        self.log_level = log_level

    def _request_id(self, attempt: Attempt) -> str:
        request_id = attempt.request_id or get_request_id() or _new_request_id()
        attempt.extra[REQUEST_ID] = request_id
        return request_id

    async def on_request(self, attempt: Attempt) -> None:
        if self.level is LogLevel.NONE:
            return
        request_id = self._request_id(attempt)
        lines = [f"Request [{request_id}] {attempt.method} {attempt.url}"]
        if attempt.retry_count:
            lines.append(f"  Retry: {attempt.retry_count}")
        if attempt.params:
            lines.append(f"  Query: {dict(attempt.params)}")
        if self.level.includes_headers and attempt.headers:
            lines.append(f"  Headers: {redact_headers(attempt.headers, self.redacted_headers)}")
        body = attempt.json if attempt.json is not None else attempt.data
        if self.level.includes_body and body is not None:
            lines.append(f"  Body: {redact_data(body, self.redacted_fields)}")
        log_structured(
            logger,
            self.log_level,
            "\n".join(lines),
            request_id=request_id,
            method=attempt.method,
            url=str(attempt.url),
        )

    async def on_response(self, attempt: Attempt, response: httpx.Response) -> None:
        if self.level is LogLevel.NONE:
            return
        request_id = attempt.request_id or "unknown"
        lines = [f"Response [{request_id}] {response.status_code} {attempt.method} {attempt.url}"]
        if self.level.includes_headers and response.headers:
            lines.append(
                f"  Headers: {redact_headers(dict(response.headers), self.redacted_headers)}"
            )
        if self.level.includes_body:
            payload = decode_payload(response)
            if payload is not None:
                lines.append(f"  Body: {redact_data(payload, self.redacted_fields)}")
        log_structured(
            logger,
            self.log_level,
            "\n".join(lines),
            request_id=request_id,
            method=attempt.method,
            url=str(attempt.url),
            status_code=response.status_code,
        )

    async def on_error(self, error: TransportError, transport: Transport) -> httpx.Response | None:  # noqa: ARG002
        if self.level is LogLevel.NONE:
            return None
        attempt = error.attempt
        request_id = attempt.request_id or "unknown"
        lines = [
            f"Error [{request_id}] {attempt.method} {attempt.url}",
            f"  Kind: {error.kind.value}",
            f"  Message: {error}",
        ]
        if error.response is not None:
            lines.append(f"  Status: {error.response.status_code}")
            if self.level.includes_body:
                payload = decode_payload(error.response)
                if payload is not None:
                    lines.append(f"  Error Data: {redact_data(payload, self.redacted_fields)}")
        log_structured(
            logger,
            self.log_level,
            "\n".join(lines),
            request_id=request_id,
            method=attempt.method,
            url=str(attempt.url),
            error_kind=error.kind.value,
            status_code=error.status_code,
        )
        return None

r"""Failure classification.

``classify`` turns any exception raised while issuing an attempt into a
``FailureRecord``. Classification never fails: an error body that cannot
be parsed simply leaves ``error_data`` empty.
"""

from __future__ import annotations

__all__ = ["classify", "code_for_kind", "code_for_status"]

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from keystonenet.codes import ResponseCode, message_for
from keystonenet.exceptions import ErrorKind, TransportError
from keystonenet.failure import FailureRecord
from keystonenet.transport import error_kind_for
from keystonenet.utils.response import decode_payload

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

E = TypeVar("E")

_KIND_CODES: dict[ErrorKind, ResponseCode] = {
    ErrorKind.CONNECTION_TIMEOUT: ResponseCode.CONNECTION_TIMEOUT,
    ErrorKind.SEND_TIMEOUT: ResponseCode.SEND_TIMEOUT,
    ErrorKind.RECEIVE_TIMEOUT: ResponseCode.RECEIVE_TIMEOUT,
    ErrorKind.CANCEL: ResponseCode.CANCEL,
    ErrorKind.CONNECTION_ERROR: ResponseCode.NO_INTERNET_CONNECTION,
    ErrorKind.BAD_CERTIFICATE: ResponseCode.BAD_CERTIFICATE,
    ErrorKind.UNKNOWN: ResponseCode.UNKNOWN,
}

_MAPPED_STATUSES = frozenset(
    {
        ResponseCode.BAD_REQUEST,
        ResponseCode.UNAUTHORISED,
        ResponseCode.FORBIDDEN,
        ResponseCode.NOT_FOUND,
        ResponseCode.METHOD_NOT_ALLOWED,
        ResponseCode.CONFLICT,
        ResponseCode.UNPROCESSABLE_ENTITY,
        ResponseCode.INTERNAL_SERVER_ERROR,
        ResponseCode.NOT_IMPLEMENTED,
        ResponseCode.BAD_GATEWAY,
        ResponseCode.SERVICE_UNAVAILABLE,
        ResponseCode.GATEWAY_TIMEOUT,
    }
)


def code_for_kind(kind: ErrorKind) -> ResponseCode:
    """Return the sentinel code of a transport-level failure.

    ``ErrorKind.BAD_RESPONSE`` has no sentinel: its code comes from the
    status of the response, see ``code_for_status``.
    """
    return _KIND_CODES.get(kind, ResponseCode.UNKNOWN)


def code_for_status(status_code: int | None) -> ResponseCode:
    """Return the code of an HTTP status, ``UNKNOWN`` when unmapped.

    Example:
        ```pycon
        >>> from keystonenet.classifier import code_for_status
        >>> code_for_status(503)
        <ResponseCode.SERVICE_UNAVAILABLE: 503>
        >>> code_for_status(418)
        <ResponseCode.UNKNOWN: -1>

        ```
    """
    if status_code is not None and status_code in _MAPPED_STATUSES:
        return ResponseCode(status_code)
    return ResponseCode.UNKNOWN


def _parse_error_data(
    response: httpx.Response | None,
    error_parser: Callable[[dict[str, Any]], E] | None,
) -> E | None:
    if error_parser is None or response is None:
        return None
    payload = decode_payload(response)
    if not isinstance(payload, dict):
        return None
    try:
        return error_parser(payload)
    except Exception as exc:  # noqa: BLE001
        logger.debug(f"Could not parse error body ({type(exc).__name__}: {exc})")
        return None


def classify(
    error: BaseException,
    error_parser: Callable[[dict[str, Any]], E] | None = None,
) -> FailureRecord[E]:
    """Classify a failure into a ``FailureRecord``.

    Args:
        error: The exception raised while issuing the attempt. Usually a
            ``TransportError``; raw httpx exceptions are accepted too and
            anything else classifies as ``UNKNOWN``.
        error_parser: Optional parser for a structured (JSON object) error
            body. It is called best-effort: if it raises, ``error_data`` is
            left empty.

    Returns:
        The failure record.

    Example:
        ```pycon
        >>> import httpx
        >>> from keystonenet.attempt import Attempt
        >>> from keystonenet.classifier import classify
        >>> from keystonenet.exceptions import ErrorKind, TransportError
        >>> response = httpx.Response(404, json={"detail": "no such user"})
        >>> error = TransportError(ErrorKind.BAD_RESPONSE, Attempt("GET", "/users/9"), response=response)
        >>> failure = classify(error, error_parser=lambda body: body["detail"])
        >>> failure.code, failure.message, failure.error_data
        (<ResponseCode.NOT_FOUND: 404>, 'Resource not found.', 'no such user')

        ```
    """
    if isinstance(error, TransportError):
        kind, response = error.kind, error.response
    elif isinstance(error, httpx.HTTPStatusError):
        kind, response = ErrorKind.BAD_RESPONSE, error.response
    elif isinstance(error, httpx.HTTPError):
        kind, response = error_kind_for(error), None
    else:
        logger.debug(f"Classifying unexpected {type(error).__name__} as unknown failure")
        return FailureRecord(ResponseCode.UNKNOWN, message_for(ResponseCode.UNKNOWN))

    if kind is ErrorKind.BAD_RESPONSE:
        code = code_for_status(response.status_code if response is not None else None)
    else:
        code = code_for_kind(kind)
    return FailureRecord(code, message_for(code), _parse_error_data(response, error_parser))

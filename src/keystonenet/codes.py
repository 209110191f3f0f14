r"""Response codes and human-readable messages for classified failures.

HTTP status codes keep their numeric value. Transport-level failures
(timeouts, connection loss, cancellation, certificate problems) have no
status code, so they are assigned reserved negative sentinels.
"""

from __future__ import annotations

__all__ = ["NETWORK_ERROR_CODES", "ResponseCode", "ResponseMessage", "message_for"]

from enum import IntEnum


class ResponseCode(IntEnum):
    """Codes stored in a ``FailureRecord``.

    Example:
        ```pycon
        >>> from keystonenet.codes import ResponseCode
        >>> ResponseCode.NOT_FOUND == 404
        True
        >>> ResponseCode.CONNECTION_TIMEOUT
        <ResponseCode.CONNECTION_TIMEOUT: -7>

        ```
    """

    # Success
    SUCCESS = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # Client errors
    BAD_REQUEST = 400
    UNAUTHORISED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422

    # Server errors
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

    # Transport-level sentinels
    UNKNOWN = -1
    NO_INTERNET_CONNECTION = -2
    SEND_TIMEOUT = -5
    RECEIVE_TIMEOUT = -6
    CONNECTION_TIMEOUT = -7
    CANCEL = -8
    BAD_CERTIFICATE = -9


class ResponseMessage:
    """Fixed user-facing messages, one per ``ResponseCode``."""

    SUCCESS = "Success"

    BAD_REQUEST = "Bad request. Please check your input."
    UNAUTHORISED = "Unauthorized. Please login again."
    FORBIDDEN = "Forbidden. You don't have permission."
    NOT_FOUND = "Resource not found."
    METHOD_NOT_ALLOWED = "Method not allowed."
    CONFLICT = "Conflict. Resource already exists."
    UNPROCESSABLE_ENTITY = "Validation failed."

    INTERNAL_SERVER_ERROR = "Internal server error. Please try again later."
    NOT_IMPLEMENTED = "Feature not implemented yet."
    BAD_GATEWAY = "Bad gateway. Please try again."
    SERVICE_UNAVAILABLE = "Service temporarily unavailable. Please try again later."
    GATEWAY_TIMEOUT = "Gateway timeout. Please try again."

    NO_INTERNET_CONNECTION = "No internet connection. Please check your network."
    SEND_TIMEOUT = "Request timeout. Please check your connection."
    RECEIVE_TIMEOUT = "Response timeout. Please check your connection."
    CONNECT_TIMEOUT = "Connection timeout. Please check your connection."
    CANCEL = "Request was cancelled."
    BAD_CERTIFICATE = "Certificate verification failed. Please check your security settings."
    UNKNOWN = "Something went wrong. Please try again."


_MESSAGES: dict[ResponseCode, str] = {
    ResponseCode.SUCCESS: ResponseMessage.SUCCESS,
    ResponseCode.BAD_REQUEST: ResponseMessage.BAD_REQUEST,
    ResponseCode.UNAUTHORISED: ResponseMessage.UNAUTHORISED,
    ResponseCode.FORBIDDEN: ResponseMessage.FORBIDDEN,
    ResponseCode.NOT_FOUND: ResponseMessage.NOT_FOUND,
    ResponseCode.METHOD_NOT_ALLOWED: ResponseMessage.METHOD_NOT_ALLOWED,
    ResponseCode.CONFLICT: ResponseMessage.CONFLICT,
    ResponseCode.UNPROCESSABLE_ENTITY: ResponseMessage.UNPROCESSABLE_ENTITY,
    ResponseCode.INTERNAL_SERVER_ERROR: ResponseMessage.INTERNAL_SERVER_ERROR,
    ResponseCode.NOT_IMPLEMENTED: ResponseMessage.NOT_IMPLEMENTED,
    ResponseCode.BAD_GATEWAY: ResponseMessage.BAD_GATEWAY,
    ResponseCode.SERVICE_UNAVAILABLE: ResponseMessage.SERVICE_UNAVAILABLE,
    ResponseCode.GATEWAY_TIMEOUT: ResponseMessage.GATEWAY_TIMEOUT,
    ResponseCode.UNKNOWN: ResponseMessage.UNKNOWN,
    ResponseCode.NO_INTERNET_CONNECTION: ResponseMessage.NO_INTERNET_CONNECTION,
    ResponseCode.SEND_TIMEOUT: ResponseMessage.SEND_TIMEOUT,
    ResponseCode.RECEIVE_TIMEOUT: ResponseMessage.RECEIVE_TIMEOUT,
    ResponseCode.CONNECTION_TIMEOUT: ResponseMessage.CONNECT_TIMEOUT,
    ResponseCode.CANCEL: ResponseMessage.CANCEL,
    ResponseCode.BAD_CERTIFICATE: ResponseMessage.BAD_CERTIFICATE,
}

# Codes that are reported as ``NetworkError`` outcomes.
# Cancellation and certificate failures are transport-level but not "network".
NETWORK_ERROR_CODES = frozenset(
    {
        ResponseCode.CONNECTION_TIMEOUT,
        ResponseCode.SEND_TIMEOUT,
        ResponseCode.RECEIVE_TIMEOUT,
        ResponseCode.NO_INTERNET_CONNECTION,
    }
)


def message_for(code: ResponseCode) -> str:
    """Return the fixed message for a code.

    Example:
        ```pycon
        >>> from keystonenet.codes import ResponseCode, message_for
        >>> message_for(ResponseCode.NOT_FOUND)
        'Resource not found.'

        ```
    """
    return _MESSAGES.get(code, ResponseMessage.UNKNOWN)

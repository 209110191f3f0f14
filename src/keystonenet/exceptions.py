r"""Exception hierarchy raised by keystonenet.

``TransportError`` is the typed failure raised by ``Transport.fetch`` for
every failed attempt. ``RequestFailedError`` is raised by
``RequestRunner.execute_raw`` once a failure has been classified.
"""

from __future__ import annotations

__all__ = ["ErrorKind", "KeystoneError", "RequestFailedError", "TransportError"]

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from keystonenet.attempt import Attempt
    from keystonenet.failure import FailureRecord


class ErrorKind(Enum):
    """Category of a failed attempt.

    Attributes:
        CONNECTION_TIMEOUT: The connection could not be established in time.
        SEND_TIMEOUT: The request body could not be written in time.
        RECEIVE_TIMEOUT: The response was not received in time.
        BAD_RESPONSE: A response arrived but its status was rejected.
        CANCEL: The attempt was cancelled through its cancel token.
        CONNECTION_ERROR: The connection failed or was lost.
        BAD_CERTIFICATE: TLS certificate verification failed.
        UNKNOWN: Any other failure.
    """

    CONNECTION_TIMEOUT = "connection_timeout"
    SEND_TIMEOUT = "send_timeout"
    RECEIVE_TIMEOUT = "receive_timeout"
    BAD_RESPONSE = "bad_response"
    CANCEL = "cancel"
    CONNECTION_ERROR = "connection_error"
    BAD_CERTIFICATE = "bad_certificate"
    UNKNOWN = "unknown"


class KeystoneError(Exception):
    """Base class for all keystonenet errors."""


class TransportError(KeystoneError):
    """Raised when a single attempt fails.

    Args:
        kind: The category of the failure.
        attempt: The attempt descriptor that failed.
        message: A descriptive error message. Generated from the kind and
            the attempt when omitted.
        response: The HTTP response, for ``ErrorKind.BAD_RESPONSE``.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from keystonenet.attempt import Attempt
        >>> from keystonenet.exceptions import ErrorKind, TransportError
        >>> error = TransportError(ErrorKind.RECEIVE_TIMEOUT, Attempt("GET", "/users"))
        >>> error.status_code is None
        True
        >>> str(error)
        'GET /users failed: receive_timeout'

        ```
    """

    def __init__(
        self,
        kind: ErrorKind,
        attempt: Attempt,
        message: str | None = None,
        *,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        if message is None:
            detail = f"status {response.status_code}" if response is not None else kind.value
            message = f"{attempt.method} {attempt.url} failed: {detail}"
        super().__init__(message)
        self.kind = kind
        self.attempt = attempt
        self.response = response
        self.cause = cause
        # set once every interceptor of the chain has seen this error
        self.chain_exhausted = False

    @property
    def status_code(self) -> int | None:
        """The HTTP status code of the rejected response, if any."""
        if self.response is None:
            return None
        return self.response.status_code


class RequestFailedError(KeystoneError):
    """Raised by ``RequestRunner.execute_raw`` with the classified failure.

    Args:
        failure: The classified failure record.
        cause: The exception that was classified.
    """

    def __init__(self, failure: FailureRecord[Any], cause: BaseException | None = None) -> None:
        super().__init__(failure.message)
        self.failure = failure
        self.cause = cause

    @property
    def code(self) -> int:
        return self.failure.code

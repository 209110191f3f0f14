r"""Normalized failure record produced by the failure classifier."""

from __future__ import annotations

__all__ = ["FailureRecord"]

from dataclasses import dataclass
from typing import Generic, TypeVar

from keystonenet.codes import NETWORK_ERROR_CODES, ResponseCode

E = TypeVar("E")


@dataclass(frozen=True)
class FailureRecord(Generic[E]):
    """Describe why a request failed.

    Equality is structural over ``(code, message, error_data)``. When the
    error payload type does not define ``__eq__`` the comparison of
    ``error_data`` falls back to identity, so callers that need deep
    comparison should use a value type (dataclass, dict, ...).

    Args:
        code: HTTP status code, or a negative ``ResponseCode`` sentinel for
            transport-level failures.
        message: Human-readable message from the fixed message table.
        error_data: Optional typed payload parsed from the error body.

    Example:
        ```pycon
        >>> from keystonenet.codes import ResponseCode
        >>> from keystonenet.failure import FailureRecord
        >>> failure = FailureRecord(ResponseCode.NOT_FOUND, "Resource not found.")
        >>> failure.is_client_error, failure.is_server_error, failure.is_auth_error
        (True, False, False)

        ```
    """

    code: int
    message: str
    error_data: E | None = None

    @property
    def is_network_error(self) -> bool:
        """``True`` for connect/send/receive timeouts and lost connectivity."""
        return self.code in NETWORK_ERROR_CODES

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.code < 600

    @property
    def is_auth_error(self) -> bool:
        return self.code in (ResponseCode.UNAUTHORISED, ResponseCode.FORBIDDEN)

    @property
    def is_validation_error(self) -> bool:
        return self.code == ResponseCode.BAD_REQUEST

    def __str__(self) -> str:
        if self.error_data is None:
            return f"FailureRecord(code={self.code}, message={self.message!r})"
        return (
            f"FailureRecord(code={self.code}, message={self.message!r}, "
            f"error_data={self.error_data!r})"
        )

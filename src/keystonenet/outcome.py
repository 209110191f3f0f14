r"""Typed request outcome model.

An ``Outcome`` is exactly one of ``Idle``, ``Loading``, ``Success``,
``Failed`` or ``NetworkError``. ``Success``, ``Failed`` and
``NetworkError`` are terminal. Dispatch with ``when`` (every branch
required) or ``maybe_when`` (missing branches fall back to ``or_else``).

Example:
    ```pycon
    >>> from keystonenet.outcome import Success
    >>> outcome = Success([1, 2, 3])
    >>> outcome.map(len)
    Success(data=3)
    >>> outcome.when(
    ...     idle=lambda: "idle",
    ...     loading=lambda: "loading",
    ...     success=lambda data: f"{len(data)} items",
    ...     failed=lambda error: error.message,
    ...     network_error=lambda error: "offline",
    ... )
    '3 items'

    ```
"""

from __future__ import annotations

__all__ = ["Failed", "Idle", "Loading", "NetworkError", "Outcome", "Success"]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from keystonenet.failure import FailureRecord

T = TypeVar("T")
E = TypeVar("E")
R = TypeVar("R")


class Outcome(Generic[T, E]):
    """Base class of the closed set of request lifecycle states."""

    __slots__ = ()

    @property
    def data_or_none(self) -> T | None:
        """The success payload, or ``None`` for every other state."""
        if isinstance(self, Success):
            return self.data
        return None

    @property
    def error_or_none(self) -> FailureRecord[E] | None:
        """The failure record of a ``Failed``/``NetworkError`` state."""
        if isinstance(self, (Failed, NetworkError)):
            return self.error
        return None

    @property
    def is_idle(self) -> bool:
        return isinstance(self, Idle)

    @property
    def is_loading(self) -> bool:
        return isinstance(self, Loading)

    @property
    def is_success(self) -> bool:
        return isinstance(self, Success)

    @property
    def is_failed(self) -> bool:
        return isinstance(self, Failed)

    @property
    def is_network_error(self) -> bool:
        return isinstance(self, NetworkError)

    @property
    def is_error(self) -> bool:
        return self.is_failed or self.is_network_error

    @property
    def is_terminal(self) -> bool:
        return self.is_success or self.is_error

    @property
    def has_data(self) -> bool:
        return self.data_or_none is not None

    @property
    def has_error(self) -> bool:
        return self.error_or_none is not None

    def when(
        self,
        *,
        idle: Callable[[], R],
        loading: Callable[[], R],
        success: Callable[[T], R],
        failed: Callable[[FailureRecord[E]], R],
        network_error: Callable[[FailureRecord[E]], R],
    ) -> R:
        """Dispatch on the state. Every branch must be supplied.

        Args:
            idle: Called for ``Idle``.
            loading: Called for ``Loading``.
            success: Called with the payload for ``Success``.
            failed: Called with the failure record for ``Failed``.
            network_error: Called with the failure record for ``NetworkError``.

        Returns:
            The value returned by the selected branch.
        """
        match self:
            case Idle():
                return idle()
            case Loading():
                return loading()
            case Success(data=data):
                return success(data)
            case Failed(error=error):
                return failed(error)
            case NetworkError(error=error):
                return network_error(error)
        msg = f"Unsupported outcome type: {type(self).__name__}"
        raise TypeError(msg)

    def maybe_when(
        self,
        *,
        or_else: Callable[[], R],
        idle: Callable[[], R] | None = None,
        loading: Callable[[], R] | None = None,
        success: Callable[[T], R] | None = None,
        failed: Callable[[FailureRecord[E]], R] | None = None,
        network_error: Callable[[FailureRecord[E]], R] | None = None,
    ) -> R:
        """Dispatch on the state, calling ``or_else`` for missing
        branches."""
        return self.when(
            idle=idle or or_else,
            loading=loading or or_else,
            success=success or (lambda _: or_else()),
            failed=failed or (lambda _: or_else()),
            network_error=network_error or (lambda _: or_else()),
        )

    def map(self, transform: Callable[[T], R]) -> Outcome[R, E]:
        """Transform the success payload.

        Every other state is rebuilt unchanged, carrying the same failure
        record.

        Args:
            transform: Function applied to the ``Success`` payload.

        Returns:
            The outcome with the transformed payload.

        Example:
            ```pycon
            >>> from keystonenet.failure import FailureRecord
            >>> from keystonenet.outcome import Failed, Loading
            >>> Loading().map(str)
            Loading()
            >>> failure = FailureRecord(404, "Resource not found.")
            >>> Failed(failure).map(str).error is failure
            True

            ```
        """
        return self.when(
            idle=Idle,
            loading=Loading,
            success=lambda data: Success(transform(data)),
            failed=Failed,
            network_error=NetworkError,
        )


@dataclass(frozen=True)
class Idle(Outcome[T, E]):
    """No request has been issued yet."""


@dataclass(frozen=True)
class Loading(Outcome[T, E]):
    """An attempt is in flight."""


@dataclass(frozen=True)
class Success(Outcome[T, E]):
    """Terminal state carrying the parsed payload."""

    data: T


@dataclass(frozen=True)
class Failed(Outcome[T, E]):
    """Terminal state for failures not classified as network errors."""

    error: FailureRecord[E]


@dataclass(frozen=True)
class NetworkError(Outcome[T, E]):
    """Terminal state for network-classified failures."""

    error: FailureRecord[E]

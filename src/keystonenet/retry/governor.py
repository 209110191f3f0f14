r"""Retry decisions for failed attempts.

The governor is a pure decision function: given the attempt and its
failure it answers ``Retry(delay)`` or ``GiveUp(reason)``. The rules are
applied in order:

1. idempotency gate: a method outside ``retryable_methods`` is never
   retried unless the attempt carries the ``allow_retry`` flag;
2. retryability: ``retry_if`` when configured, otherwise timeouts,
   connection errors and 5xx responses (never 4xx);
3. attempt budget: no retry once ``max_attempts`` attempts were made;
4. delay: exponential backoff, plus optional jitter.
"""

from __future__ import annotations

__all__ = ["GiveUp", "Retry", "RetryDecision", "RetryGovernor"]

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from keystonenet.backoff import ExponentialBackoff
from keystonenet.exceptions import ErrorKind, TransportError
from keystonenet.retry.config import RetryConfig

if TYPE_CHECKING:
    from keystonenet.attempt import Attempt

logger: logging.Logger = logging.getLogger(__name__)

_TRANSIENT_KINDS = frozenset(
    {
        ErrorKind.CONNECTION_TIMEOUT,
        ErrorKind.SEND_TIMEOUT,
        ErrorKind.RECEIVE_TIMEOUT,
        ErrorKind.CONNECTION_ERROR,
    }
)


@dataclass(frozen=True)
class Retry:
    """Retry the attempt after ``delay`` seconds."""

    delay: float


@dataclass(frozen=True)
class GiveUp:
    """Do not retry the attempt."""

    reason: str


RetryDecision = Retry | GiveUp


def is_transient(error: TransportError) -> bool:
    """Default retryability rule: timeouts, connection errors and 5xx.

    Example:
        ```pycon
        >>> import httpx
        >>> from keystonenet.attempt import Attempt
        >>> from keystonenet.exceptions import ErrorKind, TransportError
        >>> from keystonenet.retry.governor import is_transient
        >>> attempt = Attempt("GET", "/items")
        >>> is_transient(TransportError(ErrorKind.BAD_RESPONSE, attempt, response=httpx.Response(503)))
        True
        >>> is_transient(TransportError(ErrorKind.BAD_RESPONSE, attempt, response=httpx.Response(404)))
        False

        ```
    """
    if error.kind in _TRANSIENT_KINDS:
        return True
    status_code = error.status_code
    return status_code is not None and 500 <= status_code < 600


class RetryGovernor:
    """Decide whether and when a failed attempt is retried.

    Args:
        config: The retry configuration. Defaults to ``RetryConfig()``.

    Example:
        ```pycon
        >>> import httpx
        >>> from keystonenet.attempt import Attempt
        >>> from keystonenet.exceptions import ErrorKind, TransportError
        >>> from keystonenet.retry import RetryGovernor
        >>> governor = RetryGovernor()
        >>> attempt = Attempt("GET", "/items")
        >>> error = TransportError(ErrorKind.BAD_RESPONSE, attempt, response=httpx.Response(503))
        >>> governor.on_failure(attempt, error)
        Retry(delay=1.0)
        >>> payment = Attempt("POST", "/payments")
        >>> governor.on_failure(payment, error)
        GiveUp(reason='POST is not idempotent and retry was not allowed')

        ```
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self.config = config if config is not None else RetryConfig()
        self.backoff = ExponentialBackoff(
            initial_delay=self.config.initial_delay,
            multiplier=self.config.multiplier,
            max_delay=self.config.max_delay,
        )

    def is_retry_permitted(self, attempt: Attempt) -> bool:
        """Return ``True`` if the method of ``attempt`` may be retried."""
        return attempt.method in self.config.retryable_methods or attempt.allow_retry

    def is_retryable(self, error: TransportError) -> bool:
        """Return ``True`` if ``error`` is worth retrying."""
        if self.config.retry_if is not None:
            return self.config.retry_if(error)
        return is_transient(error)

    def calculate_delay(self, retry_count: int) -> float:
        """Return the delay in seconds before the next retry."""
        delay = self.backoff.calculate(retry_count)
        if self.config.jitter_factor > 0:
            delay += random.uniform(0, self.config.jitter_factor) * delay  # noqa: S311
        return delay

    def on_failure(self, attempt: Attempt, error: TransportError) -> RetryDecision:
        """Decide what to do with a failed attempt.

        Args:
            attempt: The attempt that failed. Its ``retry_count`` is the
                number of retries already issued.
            error: The failure.

        Returns:
            ``Retry`` with the delay to wait, or ``GiveUp`` with the reason.
        """
        if not self.is_retry_permitted(attempt):
            return GiveUp(f"{attempt.method} is not idempotent and retry was not allowed")
        if not self.is_retryable(error):
            return GiveUp(f"{error.kind.value} is not retryable")
        retry_count = attempt.retry_count
        if retry_count + 1 >= self.config.max_attempts:
            return GiveUp(f"max attempts ({self.config.max_attempts}) reached")
        return Retry(self.calculate_delay(retry_count))

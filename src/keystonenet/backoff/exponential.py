r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from keystonenet.backoff.base import BaseBackoffStrategy


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as ``min(max_delay, initial_delay * multiplier ** retry_count)``,
    rounded to whole milliseconds.

    Args:
        initial_delay: Delay before the first retry in seconds.
        multiplier: Growth factor between consecutive delays.
        max_delay: Optional maximum delay cap in seconds.

    Example:
        ```pycon
        >>> from keystonenet.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(initial_delay=1.0, multiplier=2.0, max_delay=30.0)
        >>> backoff.calculate(0)  # First retry
        1.0
        >>> backoff.calculate(1)  # Second retry
        2.0
        >>> backoff.calculate(10)  # Would be 1024.0, but capped
        30.0

        ```
    """

    def __init__(
        self,
        initial_delay: float = 1.0,
        multiplier: float = 2.0,
        max_delay: float | None = None,
    ) -> None:
        if initial_delay < 0:
            msg = f"initial_delay must be non-negative, got {initial_delay}"
            raise ValueError(msg)
        if multiplier < 1:
            msg = f"multiplier must be >= 1, got {multiplier}"
            raise ValueError(msg)
        if max_delay is not None and max_delay < 0:
            msg = f"max_delay must be non-negative if specified, got {max_delay}"
            raise ValueError(msg)

        self.initial_delay = initial_delay
        self.multiplier = multiplier
        self.max_delay = max_delay

    def calculate(self, retry_count: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            retry_count: Number of retries already issued.

        Returns:
            The delay in seconds, capped at ``max_delay`` if set.
        """
        delay = self.initial_delay * (self.multiplier**retry_count)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return round(delay * 1000) / 1000

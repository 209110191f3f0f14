r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy determines how long to wait before retrying a
    failed attempt based on how many retries were already issued.
    """

    @abstractmethod
    def calculate(self, retry_count: int) -> float:
        """Calculate the backoff delay before the next retry.

        Args:
            retry_count: Number of retries already issued for the request
                (0 before the first retry).

        Returns:
            The delay in seconds.
        """

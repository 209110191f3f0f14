r"""Callback payloads for observing retries and credential refreshes.

Example:
    ```pycon
    >>> from keystonenet.callbacks import RetryInfo
    >>> from keystonenet.retry import RetryConfig
    >>> def log_retry(info: RetryInfo) -> None:
    ...     print(f"retry {info.retry_count}/{info.max_attempts - 1} in {info.delay}s")
    ...
    >>> config = RetryConfig(on_retry=log_retry)

    ```
"""

from __future__ import annotations

__all__ = ["RefreshInfo", "RetryInfo"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from keystonenet.exceptions import TransportError


@dataclass
class RetryInfo:
    """Information passed to the ``on_retry`` callback.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        retry_count: The retry about to be issued (1 for the first retry).
        max_attempts: Total number of attempts allowed.
        delay: The wait in seconds before this retry.
        error: The failure that triggered the retry.
    """

    url: str
    method: str
    retry_count: int
    max_attempts: int
    delay: float
    error: TransportError


@dataclass
class RefreshInfo:
    """Information passed to the ``on_refresh`` callback.

    Attributes:
        refreshed: Whether the credential refresh succeeded.
        queued: Number of requests that waited on the refresh, excluding
            the one that triggered it.
        error: The exception raised by the refresh, if any.
    """

    refreshed: bool
    queued: int
    error: Exception | None = None

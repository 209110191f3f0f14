r"""Parameter validation for transport and retry configuration.

Every configuration dataclass validates itself on construction with
these helpers, so invalid values fail early with a ``ValueError``.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout | None, name: str = "timeout") -> None:
    """Validate a timeout parameter.

    Args:
        timeout: Maximum seconds to wait. ``None`` disables the timeout
            and ``httpx.Timeout`` instances are accepted as is.
        name: The parameter name used in the error message.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from keystonenet.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)
        >>> validate_timeout(0, name="connect_timeout")
        Traceback (most recent call last):
        ...
        ValueError: connect_timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"{name} must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(
    max_attempts: int,
    initial_delay: float,
    max_delay: float,
    multiplier: float,
    jitter_factor: float = 0.0,
) -> None:
    """Validate retry parameters.

    Args:
        max_attempts: Total number of attempts, including the first one.
            Must be >= 1. A value of 1 disables retries.
        initial_delay: Delay before the first retry in seconds. Must be >= 0.
        max_delay: Upper bound of any single delay in seconds. Must be
            >= initial_delay.
        multiplier: Growth factor between consecutive delays. Must be >= 1.
        jitter_factor: Factor for adding random jitter to delays. Must be >= 0.

    Raises:
        ValueError: If any parameter is out of range.

    Example:
        ```pycon
        >>> from keystonenet.core.validation import validate_retry_params
        >>> validate_retry_params(max_attempts=3, initial_delay=1.0, max_delay=30.0, multiplier=2.0)
        >>> validate_retry_params(
        ...     max_attempts=0, initial_delay=1.0, max_delay=30.0, multiplier=2.0
        ... )  # doctest: +SKIP

        ```
    """
    if max_attempts < 1:
        msg = f"max_attempts must be >= 1, got {max_attempts}"
        raise ValueError(msg)
    if initial_delay < 0:
        msg = f"initial_delay must be >= 0, got {initial_delay}"
        raise ValueError(msg)
    if max_delay < initial_delay:
        msg = f"max_delay must be >= initial_delay ({initial_delay}), got {max_delay}"
        raise ValueError(msg)
    if multiplier < 1:
        msg = f"multiplier must be >= 1, got {multiplier}"
        raise ValueError(msg)
    if jitter_factor < 0:
        msg = f"jitter_factor must be >= 0, got {jitter_factor}"
        raise ValueError(msg)

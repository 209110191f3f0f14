r"""Configuration of the retry governor."""

from __future__ import annotations

__all__ = [
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_DELAY",
    "DEFAULT_MULTIPLIER",
    "IDEMPOTENT_METHODS",
    "RetryConfig",
]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from keystonenet.core.validation import validate_retry_params

if TYPE_CHECKING:
    from collections.abc import Callable

    from keystonenet.callbacks import RetryInfo
    from keystonenet.exceptions import TransportError

# Total attempts, including the first one
DEFAULT_MAX_ATTEMPTS = 3

# Delay = min(max_delay, initial_delay * multiplier ** retry_count)
# With the defaults: 1s, 2s, 4s, ... capped at 30s
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0
DEFAULT_MULTIPLIER = 2.0

# Methods that may be retried without the caller's explicit consent.
# PUT and DELETE are only safe when the upstream API implements them
# idempotently; override ``retryable_methods`` otherwise.
IDEMPOTENT_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS", "TRACE"})


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Args:
        max_attempts: Total number of attempts, including the first one.
            Must be >= 1.
        initial_delay: Delay before the first retry in seconds.
        max_delay: Upper bound of any single delay in seconds.
        multiplier: Growth factor between consecutive delays.
        jitter_factor: Factor for adding random jitter to delays. The jitter
            is ``random.uniform(0, jitter_factor) * delay`` and is added to
            the delay. Set to 0 to disable jitter.
        retry_if: Optional predicate replacing the default retryability
            rule. It never bypasses the idempotency gate.
        retryable_methods: Methods retried without the ``allow_retry`` flag.
        on_retry: Optional callback called before each retry.

    Example:
        ```pycon
        >>> from keystonenet.retry import RetryConfig
        >>> config = RetryConfig(max_attempts=5)
        >>> config.merge(max_attempts=2).max_attempts
        2
        >>> sorted(RetryConfig(retryable_methods={"get"}).retryable_methods)
        ['GET']

        ```
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    multiplier: float = DEFAULT_MULTIPLIER
    jitter_factor: float = 0.0
    retry_if: Callable[[TransportError], bool] | None = None
    retryable_methods: frozenset[str] = field(default_factory=lambda: IDEMPOTENT_METHODS)
    on_retry: Callable[[RetryInfo], None] | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
        """
        validate_retry_params(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            multiplier=self.multiplier,
            jitter_factor=self.jitter_factor,
        )
        self.retryable_methods = frozenset(method.upper() for method in self.retryable_methods)

    def merge(self, **overrides: Any) -> RetryConfig:
        """Create a new config with the non-``None`` overrides applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ``RetryConfig``; the original is unchanged.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

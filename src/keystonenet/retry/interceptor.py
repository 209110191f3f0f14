r"""Interceptor applying the retry governor to failed attempts."""

from __future__ import annotations

__all__ = ["RetryInterceptor"]

import asyncio
import logging
from typing import TYPE_CHECKING

from keystonenet.callbacks import RetryInfo
from keystonenet.retry.governor import GiveUp, RetryGovernor
from keystonenet.transport import Interceptor

if TYPE_CHECKING:
    import httpx

    from keystonenet.exceptions import TransportError
    from keystonenet.retry.config import RetryConfig
    from keystonenet.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)


class RetryInterceptor(Interceptor):
    r"""Retry failed attempts according to a ``RetryGovernor``.

    On ``Retry(delay)`` the interceptor waits ``delay`` seconds, increments
    the retry counter of the attempt and replays it through the transport.
    A replay that fails again goes through the whole chain, so the
    governor sees it with the incremented counter.

    Args:
        config: The retry configuration. Ignored when ``governor`` is given.
        governor: The governor to consult.

    Example:
        ```pycon
        >>> from keystonenet.retry import RetryConfig, RetryInterceptor
        >>> interceptor = RetryInterceptor(RetryConfig(max_attempts=5))
        >>> interceptor.governor.config.max_attempts
        5

        ```
    """

    def __init__(
        self, config: RetryConfig | None = None, *, governor: RetryGovernor | None = None
    ) -> None:
        self.governor = governor if governor is not None else RetryGovernor(config)

    async def on_error(self, error: TransportError, transport: Transport) -> httpx.Response | None:
        attempt = error.attempt
        decision = self.governor.on_failure(attempt, error)
        if isinstance(decision, GiveUp):
            logger.debug(f"Not retrying {attempt.method} request to {attempt.url}: {decision.reason}")
            return None

        config = self.governor.config
        logger.debug(
            f"{attempt.method} request to {attempt.url} failed ({error.kind.value}), "
            f"retrying in {decision.delay:.2f}s "
            f"(retry {attempt.retry_count + 1}/{config.max_attempts - 1})"
        )
        if config.on_retry is not None:
            config.on_retry(
                RetryInfo(
                    url=str(attempt.url),
                    method=attempt.method,
                    retry_count=attempt.retry_count + 1,
                    max_attempts=config.max_attempts,
                    delay=decision.delay,
                    error=error,
                )
            )
        await asyncio.sleep(decision.delay)
        attempt.retry_count += 1
        return await transport.fetch(attempt)

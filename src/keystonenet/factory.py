r"""Build a transport for the active deployment environment."""

from __future__ import annotations

__all__ = ["create_environment_transport"]

import logging
from typing import TYPE_CHECKING

from keystonenet.logger import LoggingInterceptor, LogLevel
from keystonenet.transport import create_transport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from keystonenet.config import EnvironmentConfig
    from keystonenet.transport import Interceptor, Transport

logger: logging.Logger = logging.getLogger(__name__)


def create_environment_transport(
    config: EnvironmentConfig,
    *,
    interceptors: Iterable[Interceptor] = (),
    log_level: LogLevel = LogLevel.BODY,
) -> Transport:
    """Create a ``Transport`` for ``config.environment``.

    A ``LoggingInterceptor`` is appended to the chain when
    ``config.logging_enabled`` holds and the chain has none yet.

    Args:
        config: The environment configuration.
        interceptors: The interceptor chain, run in order.
        log_level: The verbosity of the appended logging interceptor.

    Returns:
        The transport. Close it with ``aclose`` or ``async with``.

    Example:
        ```pycon
        >>> from keystonenet.config import Environment, EnvironmentConfig
        >>> from keystonenet.factory import create_environment_transport
        >>> transport = create_environment_transport(
        ...     EnvironmentConfig(
        ...         environment=Environment.DEVELOPMENT,
        ...         base_urls={Environment.DEVELOPMENT: "http://localhost:8000"},
        ...     )
        ... )
        >>> [type(interceptor).__name__ for interceptor in transport.interceptors]
        ['LoggingInterceptor']

        ```
    """
    chain = list(interceptors)
    if config.logging_enabled and not any(
        isinstance(interceptor, LoggingInterceptor) for interceptor in chain
    ):
        logger.debug(f"Request logging enabled for {config.environment.display_name}")
        chain.append(LoggingInterceptor(log_level))
    return create_transport(config.to_transport_config(), interceptors=chain)

r"""Transport configuration and environment selection.

``TransportConfig`` holds everything ``create_transport`` needs to build
the shared client. ``EnvironmentConfig`` maps a deployment environment
to a ``TransportConfig``.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_HEADERS",
    "DEFAULT_TIMEOUT",
    "Environment",
    "EnvironmentConfig",
    "TransportConfig",
]

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from keystonenet.core.validation import validate_timeout

if TYPE_CHECKING:
    from collections.abc import Callable

# Default connect/read/write timeout in seconds
DEFAULT_TIMEOUT = 30.0

# Headers sent with every request unless overridden
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


@dataclass
class TransportConfig:
    """Configuration of the shared client.

    Args:
        base_url: Base address every relative attempt URL is resolved against.
        headers: Extra default headers, merged over ``DEFAULT_HEADERS``.
        connect_timeout: Seconds to establish a connection.
        read_timeout: Seconds to receive the response.
        write_timeout: Seconds to send the request.
        validate_status: Optional predicate deciding which status codes are
            accepted. Defaults to 2xx.

    Example:
        ```pycon
        >>> from keystonenet.config import TransportConfig
        >>> config = TransportConfig(base_url="https://api.example.com", headers={"X-App": "demo"})
        >>> config.all_headers()["X-App"], config.all_headers()["Accept"]
        ('demo', 'application/json')
        >>> config.merge(read_timeout=5.0).read_timeout
        5.0

        ```
    """

    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    connect_timeout: float = DEFAULT_TIMEOUT
    read_timeout: float = DEFAULT_TIMEOUT
    write_timeout: float = DEFAULT_TIMEOUT
    validate_status: Callable[[int], bool] | None = None

    def __post_init__(self) -> None:
        validate_timeout(self.connect_timeout, name="connect_timeout")
        validate_timeout(self.read_timeout, name="read_timeout")
        validate_timeout(self.write_timeout, name="write_timeout")

    def all_headers(self) -> dict[str, str]:
        """Return the default headers merged with the configured ones."""
        return {**DEFAULT_HEADERS, **self.headers}

    def httpx_timeout(self) -> httpx.Timeout:
        """Return the per-attempt timeouts as an ``httpx.Timeout``."""
        return httpx.Timeout(
            self.connect_timeout,
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
        )

    def merge(self, **overrides: Any) -> TransportConfig:
        """Create a new config with the non-``None`` overrides applied."""
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)


class Environment(Enum):
    """Deployment environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def is_development(self) -> bool:
        return self is Environment.DEVELOPMENT

    @property
    def is_staging(self) -> bool:
        return self is Environment.STAGING

    @property
    def is_production(self) -> bool:
        return self is Environment.PRODUCTION


@dataclass
class EnvironmentConfig:
    """Per-environment base addresses and overrides.

    Args:
        environment: The active environment.
        base_urls: Base address of each environment. The active one is
            required.
        headers: Default headers shared by every environment.
        connect_timeout: Seconds to establish a connection.
        read_timeout: Seconds to receive the response.
        write_timeout: Seconds to send the request.
        enable_logging: Whether ``create_environment_transport`` installs
            request logging. Defaults to ``True`` in development only.

    Example:
        ```pycon
        >>> from keystonenet.config import Environment, EnvironmentConfig
        >>> config = EnvironmentConfig(
        ...     environment=Environment.STAGING,
        ...     base_urls={
        ...         Environment.STAGING: "https://staging.example.com",
        ...         Environment.PRODUCTION: "https://api.example.com",
        ...     },
        ... )
        >>> config.base_url
        'https://staging.example.com'
        >>> config.logging_enabled
        False

        ```
    """

    environment: Environment
    base_urls: dict[Environment, str]
    headers: dict[str, str] = field(default_factory=dict)
    connect_timeout: float = DEFAULT_TIMEOUT
    read_timeout: float = DEFAULT_TIMEOUT
    write_timeout: float = DEFAULT_TIMEOUT
    enable_logging: bool | None = None

    def __post_init__(self) -> None:
        if self.environment not in self.base_urls:
            msg = f"base_urls has no entry for environment {self.environment.value!r}"
            raise ValueError(msg)

    @property
    def base_url(self) -> str:
        return self.base_urls[self.environment]

    @property
    def logging_enabled(self) -> bool:
        if self.enable_logging is None:
            return self.environment.is_development
        return self.enable_logging

    def to_transport_config(self) -> TransportConfig:
        """Build the ``TransportConfig`` of the active environment."""
        return TransportConfig(
            base_url=self.base_url,
            headers=dict(self.headers),
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            write_timeout=self.write_timeout,
        )

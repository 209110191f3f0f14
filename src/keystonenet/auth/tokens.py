r"""Credential storage consumed by the authentication interceptor."""

from __future__ import annotations

__all__ = ["InMemoryTokenManager", "TokenManager", "TokenPair"]

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger: logging.Logger = logging.getLogger(__name__)


class TokenManager(ABC):
    r"""Define the credential operations used by the refresh coordinator.

    ``refresh`` is never invoked concurrently by the coordinator. It must
    leave the stored credentials consistent on both success and failure.

    Refreshing typically calls an authentication endpoint. Use a dedicated
    client for that call: a transport carrying the ``AuthInterceptor`` would
    route a failing refresh back into the coordinator.
    """

    @abstractmethod
    async def get_access_token(self) -> str | None:
        """Return the current access token, or ``None`` if there is none."""

    @abstractmethod
    async def get_refresh_token(self) -> str | None:
        """Return the current refresh token, or ``None`` if there is none."""

    @abstractmethod
    async def refresh(self) -> bool:
        """Refresh the access token.

        Returns:
            ``True`` if the stored access token was replaced, otherwise
                ``False``.
        """

    @abstractmethod
    async def clear_tokens(self) -> None:
        """Remove the stored access and refresh tokens."""

    async def is_authenticated(self) -> bool:
        """Return ``True`` if a non-empty access token is stored."""
        token = await self.get_access_token()
        return bool(token)


@dataclass(frozen=True)
class TokenPair:
    """An access token and the refresh token that renews it."""

    access_token: str
    refresh_token: str | None = None


class InMemoryTokenManager(TokenManager):
    r"""Keep the tokens in memory and delegate renewal to a callable.

    Args:
        access_token: The initial access token.
        refresh_token: The initial refresh token.
        refresher: Async callable receiving the current refresh token and
            returning the new ``TokenPair``, or ``None`` if renewal failed.
            Without a refresher every refresh fails.

    Example:
        ```pycon
        >>> import asyncio
        >>> from keystonenet.auth import InMemoryTokenManager, TokenPair
        >>> async def renew(refresh_token):
        ...     return TokenPair("new-access", refresh_token)
        ...
        >>> manager = InMemoryTokenManager("old-access", "refresh", refresher=renew)
        >>> asyncio.run(manager.refresh())
        True
        >>> asyncio.run(manager.get_access_token())
        'new-access'

        ```
    """

    def __init__(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        *,
        refresher: Callable[[str | None], Awaitable[TokenPair | None]] | None = None,
    ) -> None:
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._refresher = refresher

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(authenticated={bool(self._access_token)}, "
            f"refreshable={self._refresher is not None})"
        )

    def set_tokens(self, access_token: str | None, refresh_token: str | None = None) -> None:
        """Replace the stored tokens, e.g. after a login."""
        self._access_token = access_token
        self._refresh_token = refresh_token

    async def get_access_token(self) -> str | None:
        return self._access_token

    async def get_refresh_token(self) -> str | None:
        return self._refresh_token

    async def refresh(self) -> bool:
        if self._refresher is None:
            logger.debug("No refresher configured, cannot refresh the access token")
            return False
        pair = await self._refresher(self._refresh_token)
        if pair is None:
            return False
        self._access_token = pair.access_token
        if pair.refresh_token is not None:
            self._refresh_token = pair.refresh_token
        return True

    async def clear_tokens(self) -> None:
        self._access_token = None
        self._refresh_token = None

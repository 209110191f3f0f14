r"""Interceptor injecting credentials and recovering from authentication
failures."""

from __future__ import annotations

__all__ = ["AuthInterceptor", "bearer"]

import logging
from typing import TYPE_CHECKING

from keystonenet.auth.coordinator import RefreshCoordinator
from keystonenet.transport import Interceptor

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from keystonenet.attempt import Attempt
    from keystonenet.auth.tokens import TokenManager
    from keystonenet.callbacks import RefreshInfo
    from keystonenet.exceptions import TransportError
    from keystonenet.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)


def bearer(token: str) -> str:
    """Format ``token`` as a bearer credential."""
    return f"Bearer {token}"


def is_unauthorized(status_code: int | None) -> bool:
    return status_code == 401


class AuthInterceptor(Interceptor):
    r"""Inject the access token and refresh it on authentication failures.

    Every attempt not flagged ``skip_auth`` gets the current access token
    in ``auth_header``. The token is read on every attempt, so replays carry
    the refreshed credential. A failure accepted by ``should_refresh`` is
    handed to the ``RefreshCoordinator``. An attempt already resolved by a
    refresh is never handed over again.

    Args:
        token_manager: The credential store.
        auth_header: Name of the credential header.
        token_formatter: Turn a token into the header value.
        should_refresh: Predicate over the failure status code (``None``
            for failures without a response). Defaults to ``== 401``.
        on_refresh: Optional callback called once per refresh resolution.

    Example:
        ```pycon
        >>> from keystonenet.auth import AuthInterceptor, InMemoryTokenManager
        >>> interceptor = AuthInterceptor(
        ...     InMemoryTokenManager("secret"),
        ...     auth_header="X-Api-Token",
        ...     token_formatter=lambda token: token,
        ... )
        >>> interceptor.auth_header
        'X-Api-Token'

        ```
    """

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        auth_header: str = "Authorization",
        token_formatter: Callable[[str], str] = bearer,
        should_refresh: Callable[[int | None], bool] | None = None,
        on_refresh: Callable[[RefreshInfo], None] | None = None,
    ) -> None:
        self.token_manager = token_manager
        self.auth_header = auth_header
        self.token_formatter = token_formatter
        self.should_refresh = should_refresh or is_unauthorized
        self.coordinator = RefreshCoordinator(token_manager, on_refresh=on_refresh)

    async def on_request(self, attempt: Attempt) -> None:
        if attempt.skip_auth:
            return
        token = await self.token_manager.get_access_token()
        if token:
            attempt.headers[self.auth_header] = self.token_formatter(token)

    async def on_error(self, error: TransportError, transport: Transport) -> httpx.Response | None:
        attempt = error.attempt
        if attempt.skip_auth or attempt.auth_replayed:
            return None
        if not self.should_refresh(error.status_code):
            return None
        return await self.coordinator.handle(error, transport)

r"""Single-flight credential refresh shared by concurrently failing
requests.

The first authentication failure starts a refresh. Failures observed
while it runs are queued. When the refresh resolves, the queue is swapped
out and the coordinator returns to idle under the same lock that guards
enqueueing, so no request can join a refresh that already resolved. The
queued requests are then replayed in FIFO order, followed by the request
that triggered the refresh, or all of them are rejected with their own
error.

The refresh and the replays run in a background task. Every caller awaits
its own future, so cancelling one caller neither stops the refresh nor
blocks the other requests.
"""

from __future__ import annotations

__all__ = ["PendingRequest", "RefreshCoordinator"]

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from keystonenet.attempt import AUTH_REPLAYED
from keystonenet.callbacks import RefreshInfo

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from keystonenet.auth.tokens import TokenManager
    from keystonenet.exceptions import TransportError
    from keystonenet.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """A request waiting for the outcome of a credential refresh.

    Attributes:
        error: The authentication failure observed by the request. Its
            attempt is the one replayed.
        future: Completed with the replayed response, or with the error
            the request is rejected with.
    """

    error: TransportError
    future: asyncio.Future[httpx.Response]

    def resolve(self, response: httpx.Response) -> None:
        if not self.future.done():
            self.future.set_result(response)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


class RefreshCoordinator:
    r"""Serialize credential refreshes across concurrent requests.

    Args:
        token_manager: The credential store to refresh.
        on_refresh: Optional callback called once per refresh resolution.

    Example:
        ```pycon
        >>> from keystonenet.auth import InMemoryTokenManager, RefreshCoordinator
        >>> coordinator = RefreshCoordinator(InMemoryTokenManager("token"))
        >>> coordinator.is_refreshing
        False

        ```
    """

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        on_refresh: Callable[[RefreshInfo], None] | None = None,
    ) -> None:
        self._token_manager = token_manager
        self._on_refresh = on_refresh
        self._lock = asyncio.Lock()
        self._in_flight = False
        self._queue: list[PendingRequest] = []
        self._task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(refreshing={self._in_flight}, "
            f"queued={len(self._queue)})"
        )

    @property
    def is_refreshing(self) -> bool:
        """``True`` while a refresh is in flight."""
        return self._in_flight

    @property
    def queued(self) -> int:
        """Number of requests waiting on the current refresh."""
        return len(self._queue)

    async def handle(self, error: TransportError, transport: Transport) -> httpx.Response:
        """Resolve an authentication failure.

        Args:
            error: The authentication failure.
            transport: The transport to replay the request through.

        Returns:
            The response of the replayed request.

        Raises:
            TransportError: If the refresh failed (the original error) or
                the replay failed.
        """
        pending = PendingRequest(error, asyncio.get_running_loop().create_future())
        async with self._lock:
            if self._in_flight:
                self._queue.append(pending)
                logger.debug(
                    f"Credential refresh in flight, queued {error.attempt.method} request "
                    f"to {error.attempt.url} ({len(self._queue)} waiting)"
                )
            else:
                self._in_flight = True
                logger.debug(
                    f"{error.attempt.method} request to {error.attempt.url} failed "
                    "authentication, refreshing credentials"
                )
                self._task = asyncio.create_task(self._refresh_and_drain(pending, transport))
        return await pending.future

    async def wait_idle(self) -> None:
        """Wait until the current refresh, including its replays, is done."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def _refresh_and_drain(self, trigger: PendingRequest, transport: Transport) -> None:
        refreshed = False
        refresh_error: Exception | None = None
        try:
            refreshed = await self._token_manager.refresh()
        except Exception as exc:  # noqa: BLE001
            logger.debug(f"Credential refresh raised {exc!r}")
            refresh_error = exc

        async with self._lock:
            queued, self._queue = self._queue, []
            self._in_flight = False
        waiting = [*queued, trigger]
        for pending in waiting:
            pending.error.attempt.extra[AUTH_REPLAYED] = True

        try:
            if self._on_refresh is not None:
                try:
                    self._on_refresh(
                        RefreshInfo(refreshed=refreshed, queued=len(queued), error=refresh_error)
                    )
                except Exception as exc:  # noqa: BLE001
                    logger.debug(f"on_refresh callback raised {exc!r}")

            if refreshed:
                logger.debug(f"Credentials refreshed, replaying {len(waiting)} request(s)")
                await self._replay(waiting, transport)
            else:
                logger.debug(f"Credential refresh failed, rejecting {len(waiting)} request(s)")
                try:
                    await self._token_manager.clear_tokens()
                except Exception as exc:  # noqa: BLE001
                    logger.debug(f"Clearing credentials raised {exc!r}")
                for pending in waiting:
                    pending.reject(pending.error)
        finally:
            for pending in waiting:
                if not pending.future.done():
                    pending.future.cancel()

    async def _replay(self, waiting: list[PendingRequest], transport: Transport) -> None:
        for pending in waiting:
            if pending.future.done():
                # the caller was cancelled
                continue
            try:
                response = await transport.fetch(pending.error.attempt)
            except Exception as exc:  # noqa: BLE001
                pending.reject(exc)
            else:
                pending.resolve(response)

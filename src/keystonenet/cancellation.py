r"""Cooperative cancellation for in-flight attempts."""

from __future__ import annotations

__all__ = ["CancelToken"]

import asyncio


class CancelToken:
    """Signal that the attempts carrying this token should stop.

    ``Transport.fetch`` races the HTTP exchange against the token and
    raises a ``TransportError`` of kind ``CANCEL`` once it fires. A single
    token may be shared by several attempts.

    Example:
        ```pycon
        >>> from keystonenet.cancellation import CancelToken
        >>> token = CancelToken()
        >>> token.is_cancelled
        False
        >>> token.cancel("user left the screen")
        >>> token.is_cancelled, token.reason
        (True, 'user left the screen')

        ```
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Calling it again has no effect."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

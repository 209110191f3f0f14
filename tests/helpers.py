r"""Shared test helpers for transport-level tests.

``RecordingHandler`` plays scripted responses through
``httpx.MockTransport`` and records every request it receives, so tests
can assert on what actually went over the wire.
"""

from __future__ import annotations

__all__ = [
    "BASE_URL",
    "RecordingHandler",
    "StaticTokenManager",
    "make_transport",
    "status_error",
    "wait_until",
]

import asyncio
from typing import TYPE_CHECKING

import httpx

from keystonenet.auth import TokenManager
from keystonenet.exceptions import ErrorKind, TransportError
from keystonenet.transport import Transport

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from keystonenet.attempt import Attempt
    from keystonenet.transport import Interceptor

BASE_URL = "https://api.example.com"


class RecordingHandler:
    """Answer requests with ``responder`` and record them.

    Args:
        responder: Build the response of a request. Exceptions it raises
            are raised by the transport, like real network errors.
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def auth_headers(self) -> list[str | None]:
        return [request.headers.get("Authorization") for request in self.requests]


def make_transport(
    handler: Callable[[httpx.Request], httpx.Response],
    interceptors: Iterable[Interceptor] = (),
) -> Transport:
    """Create a transport backed by ``httpx.MockTransport``."""
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        headers={"Accept": "application/json"},
    )
    return Transport(client, interceptors=interceptors)


def status_error(attempt: Attempt, status_code: int, **kwargs) -> TransportError:
    """Create the error raised for a rejected status code."""
    return TransportError(
        ErrorKind.BAD_RESPONSE, attempt, response=httpx.Response(status_code, **kwargs)
    )


class StaticTokenManager(TokenManager):
    """Token manager whose refresh outcome is scripted.

    Args:
        token: The initial access token.
        new_token: The token installed by a successful refresh.
        refresh_result: What ``refresh`` returns. An exception is raised.
        refresh_delay: Seconds ``refresh`` suspends before resolving, so
            concurrent failures can pile up behind it.
        blocking: Make ``refresh`` wait for ``release`` before resolving.
    """

    def __init__(
        self,
        token: str | None = "expired",
        *,
        new_token: str = "fresh",
        refresh_result: bool | Exception = True,
        refresh_delay: float = 0.01,
        blocking: bool = False,
    ) -> None:
        self.token = token
        self.new_token = new_token
        self.refresh_result = refresh_result
        self.refresh_delay = refresh_delay
        self.gate = asyncio.Event()
        if not blocking:
            self.gate.set()
        self.refresh_calls = 0
        self.clear_calls = 0

    async def get_access_token(self) -> str | None:
        return self.token

    async def get_refresh_token(self) -> str | None:
        return "refresh"

    async def refresh(self) -> bool:
        self.refresh_calls += 1
        if self.refresh_delay > 0:
            await asyncio.sleep(self.refresh_delay)
        await self.gate.wait()
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        if self.refresh_result:
            self.token = self.new_token
        return self.refresh_result

    async def clear_tokens(self) -> None:
        self.clear_calls += 1
        self.token = None

    def release(self) -> None:
        self.gate.set()


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)

r"""Transport access: the single shared channel for every attempt.

A ``Transport`` owns one ``httpx.AsyncClient`` and an ordered interceptor
chain. First attempts, credential-refresh replays and governor retries all
go through ``Transport.fetch``, so the base URL, default headers and the
interceptor chain itself apply to every one of them.
"""

from __future__ import annotations

__all__ = ["Interceptor", "Transport", "create_transport", "error_kind_for"]

import asyncio
import logging
import ssl
from typing import TYPE_CHECKING

import httpx

from keystonenet.exceptions import ErrorKind, TransportError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType
    from typing import Self

    from keystonenet.attempt import Attempt
    from keystonenet.config import TransportConfig

logger: logging.Logger = logging.getLogger(__name__)


def default_validate_status(status_code: int) -> bool:
    """Accept 2xx responses only."""
    return 200 <= status_code < 300


def _is_certificate_error(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLCertVerificationError):
            return True
        if "CERTIFICATE_VERIFY_FAILED" in str(current):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def error_kind_for(exc: BaseException) -> ErrorKind:
    """Map an httpx exception to an ``ErrorKind``.

    Args:
        exc: The exception raised by httpx.

    Returns:
        The matching error kind, ``ErrorKind.UNKNOWN`` when nothing matches.

    Example:
        ```pycon
        >>> import httpx
        >>> from keystonenet.transport import error_kind_for
        >>> error_kind_for(httpx.ReadTimeout("timed out"))
        <ErrorKind.RECEIVE_TIMEOUT: 'receive_timeout'>
        >>> error_kind_for(httpx.ConnectError("connection refused"))
        <ErrorKind.CONNECTION_ERROR: 'connection_error'>

        ```
    """
    if isinstance(exc, (httpx.ConnectTimeout, httpx.PoolTimeout)):
        return ErrorKind.CONNECTION_TIMEOUT
    if isinstance(exc, httpx.WriteTimeout):
        return ErrorKind.SEND_TIMEOUT
    if isinstance(exc, httpx.ReadTimeout):
        return ErrorKind.RECEIVE_TIMEOUT
    if isinstance(exc, httpx.TimeoutException):
        return ErrorKind.CONNECTION_TIMEOUT
    if isinstance(exc, httpx.ConnectError) and _is_certificate_error(exc):
        return ErrorKind.BAD_CERTIFICATE
    if isinstance(exc, httpx.NetworkError):
        return ErrorKind.CONNECTION_ERROR
    return ErrorKind.UNKNOWN


class Interceptor:
    """Hook into every attempt issued through a ``Transport``.

    Subclasses override the hooks they need. The default implementations
    pass everything through unchanged.
    """

    async def on_request(self, attempt: Attempt) -> None:
        """Called before the attempt is sent. May mutate ``attempt``."""

    async def on_response(self, attempt: Attempt, response: httpx.Response) -> None:
        """Called after an accepted response."""

    async def on_error(self, error: TransportError, transport: Transport) -> httpx.Response | None:
        """Called when the attempt failed.

        Args:
            error: The failure of the attempt.
            transport: The transport running the chain. Any replay must be
                issued through it.

        Returns:
            A response to resolve the attempt, or ``None`` to pass the error
            to the next interceptor.

        Raises:
            TransportError: To replace the error seen by the rest of the
                chain.
        """
        return None


class Transport:
    r"""Issue attempts through one shared ``httpx.AsyncClient``.

    Args:
        client: The shared client. Its base URL, default headers and
            timeouts apply to every attempt.
        interceptors: The interceptor chain, run in order.
        validate_status: Predicate deciding which status codes are accepted.
            Defaults to 2xx. Rejected responses raise a ``TransportError`` of
            kind ``BAD_RESPONSE``.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from keystonenet.attempt import Attempt
        >>> from keystonenet.transport import Transport
        >>> async def main():  # doctest: +SKIP
        ...     async with Transport(httpx.AsyncClient(base_url="https://api.example.com")) as transport:
        ...         return await transport.fetch(Attempt("GET", "/users/me"))
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        interceptors: Iterable[Interceptor] = (),
        validate_status: Callable[[int], bool] | None = None,
    ) -> None:
        self._client = client
        self._interceptors: list[Interceptor] = list(interceptors)
        self._validate_status = validate_status or default_validate_status

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return tuple(self._interceptors)

    def add_interceptor(self, interceptor: Interceptor) -> None:
        """Append an interceptor to the end of the chain."""
        self._interceptors.append(interceptor)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()

    async def fetch(self, attempt: Attempt) -> httpx.Response:
        """Send ``attempt`` through the interceptor chain.

        Args:
            attempt: The attempt to send.

        Returns:
            The accepted response, or the response an interceptor resolved
            the failure with.

        Raises:
            TransportError: If the attempt failed and no interceptor
                resolved it.
        """
        for interceptor in self._interceptors:
            await interceptor.on_request(attempt)

        try:
            response = await self._send(attempt)
            if not self._validate_status(response.status_code):
                raise TransportError(ErrorKind.BAD_RESPONSE, attempt, response=response)
        except TransportError as exc:
            return await self._handle_error(exc)
        except httpx.HTTPError as exc:
            message = f"{attempt.method} {attempt.url} failed: {exc}"
            return await self._handle_error(
                TransportError(error_kind_for(exc), attempt, message, cause=exc)
            )

        for interceptor in self._interceptors:
            await interceptor.on_response(attempt, response)
        return response

    async def _handle_error(self, error: TransportError) -> httpx.Response:
        for interceptor in self._interceptors:
            try:
                response = await interceptor.on_error(error, self)
            except TransportError as exc:
                if exc.chain_exhausted:
                    # a replay already ran the rest of the chain for this error
                    raise
                error = exc
                continue
            if response is not None:
                return response
        error.chain_exhausted = True
        raise error

    async def _send(self, attempt: Attempt) -> httpx.Response:
        request = attempt.build_request(self._client)
        token = attempt.cancel_token
        if token is None:
            return await self._client.send(request)
        if token.is_cancelled:
            raise TransportError(ErrorKind.CANCEL, attempt, _cancel_message(attempt, token.reason))

        send_task = asyncio.ensure_future(self._client.send(request))
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()

        if send_task.done() and not send_task.cancelled():
            return send_task.result()
        logger.debug(f"{attempt.method} request to {attempt.url} was cancelled")
        raise TransportError(ErrorKind.CANCEL, attempt, _cancel_message(attempt, token.reason))


def _cancel_message(attempt: Attempt, reason: str | None) -> str:
    message = f"{attempt.method} {attempt.url} was cancelled"
    if reason:
        message = f"{message}: {reason}"
    return message


def create_transport(
    config: TransportConfig,
    *,
    interceptors: Iterable[Interceptor] = (),
) -> Transport:
    """Create a ``Transport`` owning a new ``httpx.AsyncClient``.

    Args:
        config: Base URL, default headers, timeouts and status validation.
        interceptors: The interceptor chain, run in order.

    Returns:
        The transport. Close it with ``aclose`` or ``async with``.

    Example:
        ```pycon
        >>> from keystonenet.config import TransportConfig
        >>> from keystonenet.transport import create_transport
        >>> transport = create_transport(TransportConfig(base_url="https://api.example.com"))
        >>> transport.client.base_url.host
        'api.example.com'

        ```
    """
    client = httpx.AsyncClient(
        base_url=config.base_url,
        headers=config.all_headers(),
        timeout=config.httpx_timeout(),
    )
    return Transport(client, interceptors=interceptors, validate_status=config.validate_status)

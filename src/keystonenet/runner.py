r"""Request runner: issue an attempt and turn the result into an
``Outcome``.

Example:
    ```pycon
    >>> import asyncio
    >>> from keystonenet.attempt import Attempt
    >>> from keystonenet.config import TransportConfig
    >>> from keystonenet.runner import RequestRunner
    >>> from keystonenet.transport import create_transport
    >>> async def main():  # doctest: +SKIP
    ...     async with create_transport(TransportConfig(base_url="https://api.example.com")) as transport:
    ...         runner = RequestRunner(transport)
    ...         outcome = await runner.execute(Attempt("GET", "/users/me"), parser=User.from_json)
    ...         return outcome.when(
    ...             idle=lambda: None,
    ...             loading=lambda: None,
    ...             success=lambda user: user.name,
    ...             failed=lambda error: error.message,
    ...             network_error=lambda error: "offline",
    ...         )
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = ["RequestRunner"]

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from keystonenet.classifier import classify
from keystonenet.exceptions import RequestFailedError
from keystonenet.outcome import Failed, Loading, NetworkError, Outcome, Success
from keystonenet.utils.response import decode_payload

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    import httpx

    from keystonenet.attempt import Attempt
    from keystonenet.cancellation import CancelToken
    from keystonenet.failure import FailureRecord
    from keystonenet.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")


class RequestRunner:
    """Execute attempts through a transport and model their outcome.

    The success parser receives the decoded payload (JSON value, text, or
    ``None`` for an empty body). Exceptions raised by the success parser are
    caller errors and propagate unchanged; every other failure is classified.

    Args:
        transport: The shared transport every attempt is issued through.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        return self._transport

    async def _fetch(self, attempt: Attempt, cancel_token: CancelToken | None) -> httpx.Response:
        if cancel_token is not None:
            attempt.cancel_token = cancel_token
        return await self._transport.fetch(attempt)

    async def execute(
        self,
        attempt: Attempt,
        parser: Callable[[Any], T],
        error_parser: Callable[[dict[str, Any]], E] | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> Outcome[T, E]:
        """Execute ``attempt`` and return its terminal outcome.

        Args:
            attempt: The attempt to issue.
            parser: Builds the success value from the decoded payload.
            error_parser: Optional parser for a structured error body.
            cancel_token: Optional token attached to the attempt.

        Returns:
            ``Success``, ``Failed`` or ``NetworkError``.
        """
        try:
            response = await self._fetch(attempt, cancel_token)
        except Exception as exc:  # noqa: BLE001
            return _failure_outcome(classify(exc, error_parser))
        return Success(parser(decode_payload(response)))

    async def execute_as_stream(
        self,
        attempt: Attempt,
        parser: Callable[[Any], T],
        error_parser: Callable[[dict[str, Any]], E] | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> AsyncIterator[Outcome[T, E]]:
        """Yield ``Loading`` immediately, then exactly one terminal outcome.

        Example:
            ```pycon
            >>> async def render(runner, attempt):  # doctest: +SKIP
            ...     async for outcome in runner.execute_as_stream(attempt, parser=list):
            ...         print(outcome)
            ...

            ```
        """
        yield Loading()
        yield await self.execute(attempt, parser, error_parser, cancel_token=cancel_token)

    async def execute_raw(
        self,
        attempt: Attempt,
        parser: Callable[[Any], T],
        error_parser: Callable[[dict[str, Any]], E] | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> T:
        """Execute ``attempt`` and return the parsed value directly.

        Returns:
            The value built by ``parser``.

        Raises:
            RequestFailedError: With the classified failure if the attempt
                failed.
        """
        try:
            response = await self._fetch(attempt, cancel_token)
        except Exception as exc:  # noqa: BLE001
            failure = classify(exc, error_parser)
            logger.debug(f"{attempt.method} request to {attempt.url} failed: {failure.message}")
            raise RequestFailedError(failure, cause=exc) from exc
        return parser(decode_payload(response))


def _failure_outcome(failure: FailureRecord[E]) -> Outcome[Any, E]:
    if failure.is_network_error:
        return NetworkError(failure)
    return Failed(failure)

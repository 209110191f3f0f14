r"""Unit tests for the request runner."""

from __future__ import annotations

import httpx
import pytest

from keystonenet.attempt import Attempt
from keystonenet.cancellation import CancelToken
from keystonenet.codes import ResponseCode, ResponseMessage
from keystonenet.exceptions import RequestFailedError, TransportError
from keystonenet.failure import FailureRecord
from keystonenet.outcome import Failed, Loading, NetworkError, Success
from keystonenet.runner import RequestRunner
from tests.helpers import RecordingHandler, make_transport


def parse_user(payload: dict) -> str:
    return payload["name"]


def parse_error(body: dict) -> str:
    return body["detail"]


def respond(status_code: int, **kwargs):
    return lambda request: httpx.Response(status_code, **kwargs)


def connect_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectTimeout("connect timed out", request=request)


##################
#    execute     #
##################


@pytest.mark.asyncio
async def test_execute_success() -> None:
    """Test that a successful response yields Success with the parsed value."""
    runner = RequestRunner(make_transport(respond(200, json={"name": "ada"})))
    outcome = await runner.execute(Attempt("GET", "/users/1"), parse_user)
    assert outcome == Success("ada")


@pytest.mark.asyncio
async def test_execute_with_dict_parser_and_when() -> None:
    """Test the package-level usage: a ``dict`` parser then ``when``
    dispatch."""
    runner = RequestRunner(make_transport(respond(200, json={"name": "ada"})))
    outcome = await runner.execute(Attempt("GET", "/users/me"), dict)
    assert outcome.when(
        idle=lambda: "idle",
        loading=lambda: "loading",
        success=lambda user: f"hello {user['name']}",
        failed=lambda failure: failure.message,
        network_error=lambda failure: "offline",
    ) == "hello ada"


@pytest.mark.asyncio
async def test_execute_empty_body_gives_none_payload() -> None:
    """Test that an empty body is passed to the parser as None."""
    runner = RequestRunner(make_transport(respond(204)))
    outcome = await runner.execute(Attempt("DELETE", "/users/1"), lambda payload: payload)
    assert outcome == Success(None)


@pytest.mark.asyncio
async def test_execute_text_body() -> None:
    """Test that a non-JSON body is passed to the parser as text."""
    runner = RequestRunner(make_transport(respond(200, text="pong")))
    outcome = await runner.execute(Attempt("GET", "/ping"), str.upper)
    assert outcome == Success("PONG")


@pytest.mark.asyncio
async def test_execute_http_failure() -> None:
    """Test that a rejected status yields Failed with the parsed error body."""
    runner = RequestRunner(make_transport(respond(404, json={"detail": "no such user"})))
    outcome = await runner.execute(Attempt("GET", "/users/9"), parse_user, parse_error)
    assert outcome == Failed(
        FailureRecord(ResponseCode.NOT_FOUND, ResponseMessage.NOT_FOUND, "no such user")
    )


@pytest.mark.asyncio
async def test_execute_network_failure() -> None:
    """Test that a timeout yields NetworkError."""
    runner = RequestRunner(make_transport(connect_timeout))
    outcome = await runner.execute(Attempt("GET", "/users/1"), parse_user)
    assert outcome == NetworkError(
        FailureRecord(ResponseCode.CONNECTION_TIMEOUT, ResponseMessage.CONNECT_TIMEOUT)
    )


@pytest.mark.asyncio
async def test_execute_parser_error_propagates() -> None:
    """Test that an exception raised by the success parser is not classified."""
    runner = RequestRunner(make_transport(respond(200, json={"id": 1})))
    with pytest.raises(KeyError):
        await runner.execute(Attempt("GET", "/users/1"), parse_user)


@pytest.mark.asyncio
async def test_execute_attaches_cancel_token() -> None:
    """Test that a cancelled token yields a CANCEL failure without a request."""
    handler = RecordingHandler(respond(200, json={"name": "ada"}))
    runner = RequestRunner(make_transport(handler))
    token = CancelToken()
    token.cancel()
    outcome = await runner.execute(Attempt("GET", "/users/1"), parse_user, cancel_token=token)
    assert outcome.is_failed
    assert outcome.error_or_none.code == ResponseCode.CANCEL
    assert handler.calls == 0


##################
#    stream      #
##################


@pytest.mark.asyncio
async def test_execute_as_stream_success() -> None:
    """Test that the stream yields Loading then the terminal outcome."""
    runner = RequestRunner(make_transport(respond(200, json={"name": "ada"})))
    outcomes = [
        outcome async for outcome in runner.execute_as_stream(Attempt("GET", "/u"), parse_user)
    ]
    assert outcomes == [Loading(), Success("ada")]


@pytest.mark.asyncio
async def test_execute_as_stream_failure() -> None:
    """Test that the stream ends with exactly one error outcome."""
    runner = RequestRunner(make_transport(respond(503)))
    outcomes = [
        outcome async for outcome in runner.execute_as_stream(Attempt("GET", "/u"), parse_user)
    ]
    assert len(outcomes) == 2
    assert outcomes[0] == Loading()
    assert outcomes[1].is_failed
    assert outcomes[1].error_or_none.code == ResponseCode.SERVICE_UNAVAILABLE


##################
#      raw       #
##################


@pytest.mark.asyncio
async def test_execute_raw_success() -> None:
    """Test that execute_raw returns the parsed value."""
    runner = RequestRunner(make_transport(respond(200, json={"name": "ada"})))
    assert await runner.execute_raw(Attempt("GET", "/users/1"), parse_user) == "ada"


@pytest.mark.asyncio
async def test_execute_raw_failure() -> None:
    """Test that execute_raw raises RequestFailedError with the failure."""
    runner = RequestRunner(make_transport(respond(401, json={"detail": "expired"})))
    with pytest.raises(RequestFailedError) as exc_info:
        await runner.execute_raw(Attempt("GET", "/users/1"), parse_user, parse_error)
    assert exc_info.value.failure == FailureRecord(
        ResponseCode.UNAUTHORISED, ResponseMessage.UNAUTHORISED, "expired"
    )
    assert exc_info.value.code == 401
    assert isinstance(exc_info.value.__cause__, TransportError)

r"""Integration tests of the full interceptor chain behind a request
runner."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import Mock

import httpx
import pytest

from keystonenet import (
    Attempt,
    AuthInterceptor,
    LoggingInterceptor,
    LogLevel,
    RequestRunner,
    RetryConfig,
    RetryInterceptor,
)
from keystonenet.codes import ResponseCode
from tests.helpers import RecordingHandler, StaticTokenManager, make_transport, wait_until


class FlakyApi:
    """Require a fresh token and fail ``failures`` times with 503 first."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer fresh":
            return httpx.Response(401, json={"detail": "token expired"})
        if self.failures > 0:
            self.failures -= 1
            return httpx.Response(503)
        return httpx.Response(200, json={"path": request.url.path})


def build_runner(handler: RecordingHandler, manager: StaticTokenManager) -> RequestRunner:
    interceptors = [
        AuthInterceptor(manager),
        RetryInterceptor(RetryConfig(max_attempts=3)),
        LoggingInterceptor(LogLevel.HEADERS),
    ]
    return RequestRunner(make_transport(handler, interceptors))


def parse_path(payload: dict) -> str:
    return payload["path"]


@pytest.mark.asyncio
async def test_refresh_then_retry_then_success(mock_asleep: Mock) -> None:
    """Test a 401 recovered by a refresh whose replay is retried after a 503."""
    handler = RecordingHandler(FlakyApi(failures=1))
    manager = StaticTokenManager(refresh_delay=0)
    runner = build_runner(handler, manager)

    outcome = await runner.execute(Attempt("GET", "/orders"), parse_path)

    assert outcome.data_or_none == "/orders"
    assert manager.refresh_calls == 1
    assert handler.auth_headers() == ["Bearer expired", "Bearer fresh", "Bearer fresh"]
    mock_asleep.assert_called_once_with(1.0)


@pytest.mark.asyncio
async def test_refresh_failure_gives_failed_outcome(mock_asleep: Mock) -> None:
    """Test that a failed refresh surfaces the original 401 as Failed."""
    handler = RecordingHandler(FlakyApi())
    manager = StaticTokenManager(refresh_result=False, refresh_delay=0)
    runner = build_runner(handler, manager)

    outcome = await runner.execute(
        Attempt("GET", "/orders"), parse_path, error_parser=lambda body: body["detail"]
    )

    assert outcome.is_failed
    assert outcome.error_or_none.code == ResponseCode.UNAUTHORISED
    assert outcome.error_or_none.error_data == "token expired"
    assert manager.clear_calls == 1
    assert handler.calls == 1
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_requests_through_full_chain() -> None:
    """Test concurrent 401s through the whole chain: one refresh, all succeed."""
    handler = RecordingHandler(FlakyApi())
    manager = StaticTokenManager(blocking=True)
    auth = AuthInterceptor(manager)
    runner = RequestRunner(make_transport(handler, [auth, RetryInterceptor()]))

    tasks = [
        asyncio.create_task(runner.execute(Attempt("GET", f"/orders/{i}"), parse_path))
        for i in range(6)
    ]
    await wait_until(lambda: auth.coordinator.queued == 5)
    manager.release()
    outcomes = await asyncio.gather(*tasks)

    assert manager.refresh_calls == 1
    assert sorted(outcome.data_or_none for outcome in outcomes) == [f"/orders/{i}" for i in range(6)]


@pytest.mark.asyncio
async def test_network_failure_exhausts_retries(
    mock_asleep: Mock, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that repeated timeouts end as a NetworkError after the retry budget."""

    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    handler = RecordingHandler(timeout)
    runner = build_runner(handler, StaticTokenManager(token="fresh"))
    with caplog.at_level(logging.INFO, logger="keystonenet.logger"):
        outcome = await runner.execute(Attempt("GET", "/orders"), parse_path)

    assert outcome.is_network_error
    assert outcome.error_or_none.code == ResponseCode.RECEIVE_TIMEOUT
    assert handler.calls == 3
    assert [c.args[0] for c in mock_asleep.call_args_list] == [1.0, 2.0]
    assert sum("Error [" in record.getMessage() for record in caplog.records) == 1
    assert "Bearer fresh" not in caplog.text

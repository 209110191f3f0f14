r"""Unit tests for the retry governor."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from keystonenet.attempt import Attempt
from keystonenet.exceptions import ErrorKind, TransportError
from keystonenet.retry import GiveUp, Retry, RetryConfig, RetryGovernor, is_transient
from tests.helpers import status_error


def timeout_error(attempt: Attempt) -> TransportError:
    return TransportError(ErrorKind.CONNECTION_TIMEOUT, attempt)


##################
#  retryability  #
##################


@pytest.mark.parametrize(
    "kind",
    [
        ErrorKind.CONNECTION_TIMEOUT,
        ErrorKind.SEND_TIMEOUT,
        ErrorKind.RECEIVE_TIMEOUT,
        ErrorKind.CONNECTION_ERROR,
    ],
)
def test_is_transient_network_kinds(get_attempt: Attempt, kind: ErrorKind) -> None:
    """Test that timeouts and connection errors are transient."""
    assert is_transient(TransportError(kind, get_attempt))


@pytest.mark.parametrize("kind", [ErrorKind.CANCEL, ErrorKind.BAD_CERTIFICATE, ErrorKind.UNKNOWN])
def test_is_transient_other_kinds(get_attempt: Attempt, kind: ErrorKind) -> None:
    """Test that cancellation, certificate and unknown failures are not."""
    assert not is_transient(TransportError(kind, get_attempt))


@pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
def test_is_transient_server_errors(get_attempt: Attempt, status: int) -> None:
    """Test that 5xx responses are transient."""
    assert is_transient(status_error(get_attempt, status))


@pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422, 429])
def test_is_transient_client_errors(get_attempt: Attempt, status: int) -> None:
    """Test that 4xx responses are never transient."""
    assert not is_transient(status_error(get_attempt, status))


##################
#   on_failure   #
##################


def test_on_failure_first_503_retries_after_initial_delay(get_attempt: Attempt) -> None:
    """Test that the first retry waits initial_delay."""
    governor = RetryGovernor(RetryConfig(initial_delay=1.0, multiplier=2.0, max_delay=30.0))
    assert governor.on_failure(get_attempt, status_error(get_attempt, 503)) == Retry(1.0)


def test_on_failure_second_503_applies_multiplier(get_attempt: Attempt) -> None:
    """Test that the second retry waits min(max_delay, initial_delay * multiplier)."""
    governor = RetryGovernor(RetryConfig(initial_delay=1.0, multiplier=2.0, max_delay=30.0))
    get_attempt.retry_count = 1
    assert governor.on_failure(get_attempt, status_error(get_attempt, 503)) == Retry(2.0)


def test_on_failure_delay_is_capped(get_attempt: Attempt) -> None:
    """Test that delays never exceed max_delay."""
    governor = RetryGovernor(
        RetryConfig(max_attempts=10, initial_delay=1.0, multiplier=10.0, max_delay=5.0)
    )
    get_attempt.retry_count = 3
    assert governor.on_failure(get_attempt, timeout_error(get_attempt)) == Retry(5.0)


@pytest.mark.parametrize("method", ["POST", "PATCH"])
def test_on_failure_non_idempotent_gives_up(method: str) -> None:
    """Test that non-idempotent methods are never retried without consent."""
    attempt = Attempt(method, "/payments")
    decision = RetryGovernor().on_failure(attempt, status_error(attempt, 503))
    assert isinstance(decision, GiveUp)
    assert "not idempotent" in decision.reason


def test_on_failure_non_idempotent_ignores_retry_if() -> None:
    """Test that retry_if never bypasses the idempotency gate."""
    attempt = Attempt("POST", "/payments")
    governor = RetryGovernor(RetryConfig(retry_if=lambda error: True))
    assert isinstance(governor.on_failure(attempt, timeout_error(attempt)), GiveUp)


def test_on_failure_allow_retry_flag() -> None:
    """Test that allow_retry authorizes retrying a non-idempotent method."""
    attempt = Attempt("POST", "/payments", allow_retry=True)
    assert RetryGovernor().on_failure(attempt, status_error(attempt, 503)) == Retry(1.0)


def test_on_failure_custom_retryable_methods() -> None:
    """Test that the retryable method set can be overridden."""
    governor = RetryGovernor(RetryConfig(retryable_methods=frozenset({"GET"})))
    attempt = Attempt("PUT", "/items/1")
    assert isinstance(governor.on_failure(attempt, status_error(attempt, 503)), GiveUp)


@pytest.mark.parametrize("status", [400, 401, 404, 422])
def test_on_failure_client_error_gives_up(get_attempt: Attempt, status: int) -> None:
    """Test that 4xx responses are not retried."""
    decision = RetryGovernor().on_failure(get_attempt, status_error(get_attempt, status))
    assert decision == GiveUp("bad_response is not retryable")


def test_on_failure_retry_if_overrides_default(get_attempt: Attempt) -> None:
    """Test that retry_if replaces the default retryability rule."""
    governor = RetryGovernor(RetryConfig(retry_if=lambda error: error.status_code == 429))
    assert governor.on_failure(get_attempt, status_error(get_attempt, 429)) == Retry(1.0)
    assert isinstance(governor.on_failure(get_attempt, status_error(get_attempt, 503)), GiveUp)


def test_on_failure_attempt_budget(get_attempt: Attempt) -> None:
    """Test that max_attempts counts the first attempt."""
    governor = RetryGovernor(RetryConfig(max_attempts=3))
    decisions = []
    for retry_count in range(3):
        get_attempt.retry_count = retry_count
        decisions.append(governor.on_failure(get_attempt, timeout_error(get_attempt)))
    assert decisions == [Retry(1.0), Retry(2.0), GiveUp("max attempts (3) reached")]


def test_on_failure_single_attempt_never_retries(get_attempt: Attempt) -> None:
    """Test that max_attempts=1 disables retries."""
    governor = RetryGovernor(RetryConfig(max_attempts=1))
    assert isinstance(governor.on_failure(get_attempt, timeout_error(get_attempt)), GiveUp)


def test_on_failure_jitter(get_attempt: Attempt) -> None:
    """Test that jitter is added on top of the backoff delay."""
    governor = RetryGovernor(RetryConfig(jitter_factor=0.5))
    with patch("keystonenet.retry.governor.random.uniform", return_value=0.5) as uniform:
        assert governor.on_failure(get_attempt, timeout_error(get_attempt)) == Retry(1.5)
    uniform.assert_called_once_with(0, 0.5)


def test_governor_default_config() -> None:
    """Test that the governor uses RetryConfig() by default."""
    governor = RetryGovernor()
    assert governor.config == RetryConfig()
    assert governor.backoff.max_delay == 30.0


def test_governor_response_without_request(get_attempt: Attempt) -> None:
    """Test that a bare response is enough to classify the failure."""
    error = TransportError(ErrorKind.BAD_RESPONSE, get_attempt, response=httpx.Response(502))
    assert RetryGovernor().on_failure(get_attempt, error) == Retry(1.0)

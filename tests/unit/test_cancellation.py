r"""Unit tests for CancelToken."""

from __future__ import annotations

import asyncio

import pytest

from keystonenet.cancellation import CancelToken


def test_cancel_token_initial_state() -> None:
    """Test a fresh token."""
    token = CancelToken()
    assert not token.is_cancelled
    assert token.reason is None


def test_cancel_token_cancel_is_idempotent() -> None:
    """Test that only the first reason is kept."""
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")
    assert token.is_cancelled
    assert token.reason == "first"


@pytest.mark.asyncio
async def test_cancel_token_wait() -> None:
    """Test that wait returns once the token is cancelled."""
    token = CancelToken()
    asyncio.get_running_loop().call_soon(token.cancel)
    await asyncio.wait_for(token.wait(), 1)
    assert token.is_cancelled

r"""Retry governor and its interceptor."""

from __future__ import annotations

__all__ = [
    "IDEMPOTENT_METHODS",
    "GiveUp",
    "Retry",
    "RetryConfig",
    "RetryDecision",
    "RetryGovernor",
    "RetryInterceptor",
    "is_transient",
]

from keystonenet.retry.config import IDEMPOTENT_METHODS, RetryConfig
from keystonenet.retry.governor import GiveUp, Retry, RetryDecision, RetryGovernor, is_transient
from keystonenet.retry.interceptor import RetryInterceptor

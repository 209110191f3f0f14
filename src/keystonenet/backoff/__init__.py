r"""Backoff strategies for retry delays."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from keystonenet.backoff.base import BaseBackoffStrategy
from keystonenet.backoff.exponential import ExponentialBackoff

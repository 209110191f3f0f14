r"""Credential injection and single-flight credential refresh."""

from __future__ import annotations

__all__ = [
    "AuthInterceptor",
    "InMemoryTokenManager",
    "PendingRequest",
    "RefreshCoordinator",
    "TokenManager",
    "TokenPair",
    "bearer",
]

from keystonenet.auth.coordinator import PendingRequest, RefreshCoordinator
from keystonenet.auth.interceptor import AuthInterceptor, bearer
from keystonenet.auth.tokens import InMemoryTokenManager, TokenManager, TokenPair

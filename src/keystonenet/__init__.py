r"""keystonenet - Typed outcomes, single-flight credential refresh and
guarded retries for httpx.

Every attempt goes through one ``Transport`` owning one
``httpx.AsyncClient`` and an ordered interceptor chain. A
``RequestRunner`` turns each call into an ``Outcome`` (``Success``,
``Failed`` or ``NetworkError``) instead of an exception.

Key Features:
    - Typed outcomes with exhaustive ``when`` dispatch and ``map``
    - Failure classification into stable response codes and messages
    - Single-flight credential refresh shared by concurrent 401s
    - Exponential backoff retries gated by method idempotency
    - Request/response logging with header and body redaction
    - Cooperative cancellation of in-flight attempts

Example:
    ```pycon
    >>> from keystonenet import (
    ...     AuthInterceptor,
    ...     InMemoryTokenManager,
    ...     RequestRunner,
    ...     RetryInterceptor,
    ...     TransportConfig,
    ...     create_transport,
    ... )
    >>> from keystonenet.attempt import Attempt
    >>> transport = create_transport(
    ...     TransportConfig(base_url="https://api.example.com"),
    ...     interceptors=[AuthInterceptor(InMemoryTokenManager("token")), RetryInterceptor()],
    ... )
    >>> runner = RequestRunner(transport)
    >>> outcome = await runner.execute(Attempt("GET", "/users/me"), dict)  # doctest: +SKIP
    >>> outcome.when(  # doctest: +SKIP
    ...     idle=lambda: "idle",
    ...     loading=lambda: "loading",
    ...     success=lambda user: f"hello {user['name']}",
    ...     failed=lambda failure: failure.message,
    ...     network_error=lambda failure: "offline",
    ... )

    ```
"""

from __future__ import annotations

__all__ = [
    "Attempt",
    "AuthInterceptor",
    "CancelToken",
    "Failed",
    "FailureRecord",
    "Idle",
    "InMemoryTokenManager",
    "Interceptor",
    "KeystoneError",
    "Loading",
    "LogLevel",
    "LoggingInterceptor",
    "NetworkError",
    "Outcome",
    "RequestFailedError",
    "RequestRunner",
    "ResponseCode",
    "RetryConfig",
    "RetryInterceptor",
    "Success",
    "TokenManager",
    "Transport",
    "TransportConfig",
    "TransportError",
    "__version__",
    "create_environment_transport",
    "create_transport",
]

from importlib.metadata import PackageNotFoundError, version

from keystonenet.attempt import Attempt
from keystonenet.auth import AuthInterceptor, InMemoryTokenManager, TokenManager
from keystonenet.cancellation import CancelToken
from keystonenet.codes import ResponseCode
from keystonenet.config import TransportConfig
from keystonenet.exceptions import KeystoneError, RequestFailedError, TransportError
from keystonenet.factory import create_environment_transport
from keystonenet.failure import FailureRecord
from keystonenet.logger import LoggingInterceptor, LogLevel
from keystonenet.outcome import Failed, Idle, Loading, NetworkError, Outcome, Success
from keystonenet.retry import RetryConfig, RetryInterceptor
from keystonenet.runner import RequestRunner
from keystonenet.transport import Interceptor, Transport, create_transport

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

r"""Attempt descriptor consumed by the transport and the interceptors."""

from __future__ import annotations

__all__ = [
    "ALLOW_RETRY",
    "AUTH_REPLAYED",
    "REQUEST_ID",
    "RETRY_COUNT",
    "SKIP_AUTH",
    "Attempt",
]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from keystonenet.cancellation import CancelToken

# Keys of the caller-settable ``Attempt.extra`` map
SKIP_AUTH = "skip_auth"
ALLOW_RETRY = "allow_retry"
RETRY_COUNT = "retry_count"
AUTH_REPLAYED = "auth_replayed"
REQUEST_ID = "request_id"


@dataclass(init=False)
class Attempt:
    """Describe one logical request.

    The same descriptor is reused when the request is retried or replayed,
    so the retry counter and any header injected by an interceptor travel
    with it.

    Args:
        method: The HTTP method. Normalized to upper case.
        url: Absolute URL, or a path resolved against the client base URL.
        headers: Request headers. The credential header is overwritten by
            name when credentials are injected.
        params: Optional query parameters.
        json: Optional JSON body.
        content: Optional raw body.
        data: Optional form body.
        timeout: Optional per-attempt timeout. The client default applies
            when ``None``.
        extra: Free-form flags read by the interceptors, see ``skip_auth``,
            ``allow_retry`` and ``retry_count``.
        cancel_token: Optional token that cancels the attempt.

    Example:
        ```pycon
        >>> from keystonenet.attempt import Attempt
        >>> attempt = Attempt("post", "/payments", json={"amount": 10}, allow_retry=True)
        >>> attempt.method, attempt.allow_retry, attempt.retry_count
        ('POST', True, 0)

        ```
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    json: Any = None
    content: bytes | str | None = None
    data: Mapping[str, Any] | None = None
    timeout: float | httpx.Timeout | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    cancel_token: CancelToken | None = None

    def __init__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | str | None = None,
        data: Mapping[str, Any] | None = None,
        timeout: float | httpx.Timeout | None = None,
        extra: Mapping[str, Any] | None = None,
        cancel_token: CancelToken | None = None,
        skip_auth: bool = False,
        allow_retry: bool = False,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers = dict(headers or {})
        self.params = params
        self.json = json
        self.content = content
        self.data = data
        self.timeout = timeout
        self.extra = dict(extra or {})
        self.cancel_token = cancel_token
        if skip_auth:
            self.extra[SKIP_AUTH] = True
        if allow_retry:
            self.extra[ALLOW_RETRY] = True

    @property
    def skip_auth(self) -> bool:
        """``True`` for public endpoints that never carry credentials."""
        return self.extra.get(SKIP_AUTH) is True

    @property
    def allow_retry(self) -> bool:
        """``True`` when the caller authorizes retrying a non-idempotent
        method."""
        return self.extra.get(ALLOW_RETRY) is True

    @property
    def retry_count(self) -> int:
        """Number of retries already issued for this logical request."""
        return int(self.extra.get(RETRY_COUNT, 0))

    @retry_count.setter
    def retry_count(self, value: int) -> None:
        self.extra[RETRY_COUNT] = value

    @property
    def auth_replayed(self) -> bool:
        """``True`` once the attempt went through a credential refresh,
        whatever its outcome."""
        return self.extra.get(AUTH_REPLAYED) is True

    @property
    def request_id(self) -> str | None:
        return self.extra.get(REQUEST_ID)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        """Build the ``httpx.Request`` through ``client`` so its base URL,
        default headers and timeouts apply.

        Args:
            client: The shared client of the transport.

        Returns:
            The request ready to be sent.
        """
        kwargs: dict[str, Any] = {"headers": self.headers}
        if self.params is not None:
            kwargs["params"] = self.params
        if self.json is not None:
            kwargs["json"] = self.json
        if self.content is not None:
            kwargs["content"] = self.content
        if self.data is not None:
            kwargs["data"] = self.data
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return client.build_request(self.method, self.url, **kwargs)

r"""HTTP response payload helpers."""

from __future__ import annotations

__all__ = ["decode_payload"]

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


def decode_payload(response: httpx.Response) -> Any:
    """Decode the body of a response.

    Args:
        response: The response to decode. Its body must have been read.

    Returns:
        ``None`` for an empty body, the decoded JSON value when the body is
        valid JSON, otherwise the body as text.

    Example:
        ```pycon
        >>> import httpx
        >>> from keystonenet.utils.response import decode_payload
        >>> decode_payload(httpx.Response(200, json={"id": 1}))
        {'id': 1}
        >>> decode_payload(httpx.Response(200, text="pong"))
        'pong'
        >>> decode_payload(httpx.Response(204)) is None
        True

        ```
    """
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text

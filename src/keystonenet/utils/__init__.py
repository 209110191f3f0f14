r"""Helpers shared by the transport, the runner and the interceptors."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_request_id",
    "decode_payload",
    "get_request_id",
    "log_structured",
    "set_request_id",
]

from keystonenet.utils.response import decode_payload
from keystonenet.utils.structured_logging import (
    StructuredFormatter,
    clear_request_id,
    get_request_id,
    log_structured,
    set_request_id,
)

r"""Shared validation helpers used by the configuration objects."""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from keystonenet.core.validation import validate_retry_params, validate_timeout

"""Helpers for safe logging.

Coordinator ``Connect`` packets carry the shared secret in clear text.
This module masks it before packets reach the ``log`` channel or the
stdlib logger.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

_SENSITIVE_KEYS: frozenset[str] = frozenset({"password", "token"})

_MASK = "<redacted>"


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a JSON-ready copy of *value* with secrets masked and long strings cut."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)

    if isinstance(value, dict):
        return {
            key: _MASK if str(key).lower() in _SENSITIVE_KEYS else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}...<truncated>"
    # Scalars pass through; anything else is stringified by the JSON encoder.
    return value

"""Base model and enum for relay packets.

Every packet model inherits from :class:`TaBaseModel` which provides:

* ``alias_generator=to_pascal`` so the relay's PascalCase keys map
  automatically to snake_case fields.
* A ``raw`` dict that captures the original payload, so fields this
  library does not model are never lost.

Wire enums inherit from :class:`TaEnum` which adds an ``UNKNOWN``
member at ``-1`` and a ``_missing_`` hook that also accepts member names
(``"PlayerAdded"``, ``"player_added"``) and falls back to ``UNKNOWN``.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_pascal


def _name_key(value: str) -> str:
    return value.replace("_", "").replace("-", "").strip().lower()


def pick(values: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present value among *keys* (wire alias, then field name)."""
    for key in keys:
        if key in values:
            return values[key]
    return None


def parse_number(value: Any) -> int | float | None:
    """Coerce a wire number (int, float or numeric string); anything else becomes ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def parse_text(value: Any) -> str:
    """Coerce a display string; ``None`` and non-scalar values become ``""``."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


WireNumber = Annotated[int | float | None, BeforeValidator(parse_number)]
"""Annotated type for numeric fields the overlay only displays."""

WireText = Annotated[str, BeforeValidator(parse_text)]
"""Annotated type for display strings that may arrive as ``null``."""


class TaEnum(enum.IntEnum):
    """Base for relay wire enums.

    Every subclass **must** define ``UNKNOWN = -1``.
    """

    @classmethod
    def _missing_(cls, value: object) -> TaEnum:
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls(int(text))
            wanted = _name_key(text)
            for member in cls:
                if _name_key(member.name) == wanted:
                    return member
        # noinspection PyUnresolvedReferences
        unknown: TaEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """``BeforeValidator`` hook: map ints, numeric strings and names onto members."""
        if isinstance(value, cls):
            return value
        return cls(value)


class TaBaseModel(BaseModel):
    """Base for relay packet models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_pascal,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original wire dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        """Keep the original payload unless the caller passed ``raw=`` explicitly."""
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        working = dict(values)
        working["raw"] = dict(values)
        return working

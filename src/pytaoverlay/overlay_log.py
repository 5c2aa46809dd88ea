"""Severity-filtered log feed for overlay consumers.

Entries that pass the filter are formatted as
``[<Severity>](<ISO-8601 UTC>): <JSON>``, published on the ``log`` channel
and mirrored to the ``pytaoverlay`` stdlib logger. Entries that do not pass
cost one comparison: the data is never serialized.
"""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pytaoverlay._redact import redact_for_log

if TYPE_CHECKING:
    from pytaoverlay.state.notifier import Notifier

_logger = logging.getLogger("pytaoverlay")


class LogSeverity(enum.IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS: dict[LogSeverity, int] = {
    LogSeverity.DEBUG: logging.DEBUG,
    LogSeverity.INFO: logging.INFO,
    LogSeverity.WARN: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_entry(data: Any, severity: LogSeverity, at: datetime) -> str:
    stamp = at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    body = json.dumps(redact_for_log(data), ensure_ascii=False, default=str)
    return f"[{severity.label}]({stamp}): {body}"


class OverlayLog:
    """Callable log sink configured once with an enable flag and threshold."""

    def __init__(
        self,
        notifier: Notifier,
        *,
        enabled: bool = False,
        severity: LogSeverity = LogSeverity.INFO,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._notifier = notifier
        self._enabled = enabled
        self._severity = severity
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def severity(self) -> LogSeverity:
        return self._severity

    def is_enabled_for(self, severity: LogSeverity) -> bool:
        return self._enabled and severity >= self._severity

    def __call__(self, data: Any, severity: LogSeverity) -> None:
        if not self.is_enabled_for(severity):
            return
        message = format_entry(data, severity, self._clock())
        _logger.log(severity.logging_level, "%s", message)
        self._notifier.log.emit(message)

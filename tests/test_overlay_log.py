from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from pytaoverlay.models.packet import ConnectPacket, ConnectType
from pytaoverlay.overlay_log import LogSeverity, OverlayLog, format_entry
from pytaoverlay.state.notifier import Notifier


def _dt() -> datetime:
    return datetime(2026, 1, 1, 12, 30, tzinfo=UTC)


class _ExplodingRepr:
    def __repr__(self) -> str:
        raise AssertionError("suppressed log entries must not be formatted")


def _log(*, enabled: bool = True, severity: LogSeverity = LogSeverity.INFO) -> tuple[OverlayLog, list[str]]:
    notifier = Notifier()
    entries: list[str] = []
    notifier.log.subscribe(entries.append)
    return OverlayLog(notifier, enabled=enabled, severity=severity, clock=_dt), entries


def test_format_entry() -> None:
    assert format_entry("Not handled", LogSeverity.WARN, _dt()) == '[Warn](2026-01-01T12:30:00.000Z): "Not handled"'


def test_disabled_log_never_formats() -> None:
    log, entries = _log(enabled=False, severity=LogSeverity.DEBUG)

    log(_ExplodingRepr(), LogSeverity.ERROR)

    assert entries == []


def test_below_threshold_is_suppressed() -> None:
    log, entries = _log(severity=LogSeverity.WARN)

    log(_ExplodingRepr(), LogSeverity.DEBUG)
    log(_ExplodingRepr(), LogSeverity.INFO)
    log("kept", LogSeverity.WARN)
    log("kept too", LogSeverity.ERROR)

    assert entries == [
        '[Warn](2026-01-01T12:30:00.000Z): "kept"',
        '[Error](2026-01-01T12:30:00.000Z): "kept too"',
    ]


def test_is_enabled_for() -> None:
    log, _ = _log(severity=LogSeverity.INFO)

    assert log.is_enabled_for(LogSeverity.INFO)
    assert not log.is_enabled_for(LogSeverity.DEBUG)


def test_packet_passwords_are_redacted() -> None:
    log, entries = _log(severity=LogSeverity.DEBUG)

    log(ConnectPacket(client_type=ConnectType.COORDINATOR, name="Host", password="hunter2"), LogSeverity.DEBUG)

    assert len(entries) == 1
    assert "hunter2" not in entries[0]
    assert '"Password": "<redacted>"' in entries[0]
    assert '"Name": "Host"' in entries[0]


def test_entries_mirror_to_stdlib_logging(caplog: pytest.LogCaptureFixture) -> None:
    log, _ = _log(severity=LogSeverity.DEBUG)

    with caplog.at_level(logging.DEBUG, logger="pytaoverlay"):
        log("socket opened", LogSeverity.INFO)
        log("Not handled", LogSeverity.WARN)

    levels = [record.levelno for record in caplog.records if record.name == "pytaoverlay"]
    assert levels == [logging.INFO, logging.WARNING]

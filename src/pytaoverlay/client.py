"""High-level async client mirroring relay state for a broadcast overlay."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from pytaoverlay._codec import build_heartbeat_packet, decode_packet
from pytaoverlay._transport import OverlayTransport
from pytaoverlay.config import TaConfig
from pytaoverlay.dispatcher import PacketDispatcher
from pytaoverlay.exceptions import TaDecodeError, TaError, TaTransportError
from pytaoverlay.models.packet import Match, Packet, PacketType, Player
from pytaoverlay.overlay_log import LogSeverity, OverlayLog
from pytaoverlay.state.notifier import Notifier
from pytaoverlay.state.store import OverlayStore

_logger = logging.getLogger(__name__)

_BANNER = "-" * 57


class TaClient:
    """Async client for the relay's overlay stream.

    Usage::

        async with TaClient(config, on_match_changed=render) as client:
            await client.run()

    All notifications are delivered on the event loop thread, one packet at
    a time, in the order the relay sent them.
    """

    def __init__(
        self,
        config: TaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        on_coordinator_changed: Callable[[str | None], None] | None = None,
        on_match_changed: Callable[[Match | None], None] | None = None,
        on_score_update: Callable[[list[str], Player], None] | None = None,
        on_log: Callable[[str], None] | None = None,
        on_error: Callable[[TaError], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: OverlayTransport | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._resolution_timer: asyncio.TimerHandle | None = None

        self.notifier = Notifier()
        self.log = OverlayLog(self.notifier, enabled=config.log_enabled, severity=config.log_severity)
        self.store = OverlayStore(self.notifier)
        self.dispatcher = PacketDispatcher(
            store=self.store,
            notifier=self.notifier,
            log=self.log,
            password=config.effective_password(),
            resolution_timeout=config.resolution_timeout,
        )

        if on_coordinator_changed is not None:
            self.notifier.coordinator_changed.subscribe(on_coordinator_changed)
        if on_match_changed is not None:
            self.notifier.match_changed.subscribe(on_match_changed)
        if on_score_update is not None:
            self.notifier.score_update.subscribe(on_score_update)
        if on_log is not None:
            self.notifier.log.subscribe(on_log)
        if on_error is not None:
            self.notifier.error.subscribe(on_error)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TaClient:
        self._loop = asyncio.get_running_loop()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        transport = OverlayTransport(self._config, self._http_session)
        try:
            await transport.open()
        except TaTransportError:
            await self._close_owned_session()
            raise
        self._transport = transport
        self._log_banner("WebSocket connection Opened.")
        if self._config.heartbeat_enabled:
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None
        self._cancel_resolution_timer()
        transport = self._transport
        self._transport = None
        if transport is not None:
            await transport.close()
        await self._close_owned_session()
        self._loop = None

    async def _close_owned_session(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Mirrored state
    # ------------------------------------------------------------------

    @property
    def coordinators(self) -> dict[str, str]:
        return self.store.coordinators

    @property
    def players(self) -> dict[str, Player]:
        return self.store.players

    @property
    def main_coordinator(self) -> str | None:
        return self.store.main_coordinator

    @property
    def main_match(self) -> Match | None:
        return self.store.main_match

    def get_coordinator_key_from_name(self, name: str) -> str | None:
        return self.store.coordinator_id_for_name(name)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Consume messages until the relay closes the socket."""
        transport = self._require_transport()
        async for data in transport.messages():
            self.handle_message(data)
        self._log_banner(
            f"WebSocket connection closed.\nReason: {transport.close_reason}\nCode: {transport.close_code}",
        )

    def handle_message(self, data: str | bytes) -> None:
        """Decode and dispatch one websocket message.

        Undecodable messages are dropped: the :class:`TaDecodeError` is
        published on the ``error`` channel and logged at Warn.
        """
        try:
            packet = decode_packet(data)
        except TaDecodeError as exc:
            self.log(f"Dropped undecodable packet: {exc}", LogSeverity.WARN)
            self.notifier.error.emit(exc)
            return

        verbose = packet.type != PacketType.COMMAND
        if verbose:
            self.log(_BANNER, LogSeverity.DEBUG)
            self.log(f"Packet type: {packet.type.name}", LogSeverity.DEBUG)
        self.dispatcher.dispatch(packet)
        if verbose:
            self.log(packet.specific_packet, LogSeverity.DEBUG)
            self.log(_BANNER, LogSeverity.DEBUG)
        self._schedule_resolution_timer()

    def _schedule_resolution_timer(self) -> None:
        loop = self._loop
        if loop is None:
            return
        self._cancel_resolution_timer()
        deadline = self.dispatcher.next_deadline()
        if deadline is None:
            return
        self._resolution_timer = loop.call_later(max(0.0, deadline - time.monotonic()), self._on_resolution_timer)

    def _cancel_resolution_timer(self) -> None:
        if self._resolution_timer is not None:
            self._resolution_timer.cancel()
            self._resolution_timer = None

    def _on_resolution_timer(self) -> None:
        self._resolution_timer = None
        self.dispatcher.expire_pending_connects()
        self._schedule_resolution_timer()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_packet(self, packet: Packet) -> None:
        await self._require_transport().send_packet(packet)

    async def send_heartbeat(self) -> None:
        await self.send_packet(build_heartbeat_packet())

    async def _heartbeat_loop(self) -> None:
        while self._transport is not None and self._transport.is_open:
            try:
                await self.send_heartbeat()
            except TaTransportError:
                _logger.debug("Heartbeat send failed", exc_info=True)
                return
            await asyncio.sleep(self._config.heartbeat_interval)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> OverlayTransport:
        if self._transport is None:
            raise TaTransportError("Client not connected. Use 'async with TaClient(...) as client:'")
        return self._transport

    def _log_banner(self, message: str) -> None:
        self.log(_BANNER, LogSeverity.INFO)
        self.log(message, LogSeverity.INFO)
        self.log(_BANNER, LogSeverity.INFO)

"""Websocket transport to the relay server."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import aiohttp

from pytaoverlay.config import TaConfig
from pytaoverlay.exceptions import TaTransportError
from pytaoverlay.models.packet import Packet

_logger = logging.getLogger(__name__)


class OverlayTransport:
    """One websocket connection to the relay, opened on an existing HTTP session."""

    def __init__(self, config: TaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self.close_reason = ""

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def close_code(self) -> int | None:
        return self._ws.close_code if self._ws is not None else None

    async def open(self) -> None:
        _logger.debug("Websocket connect %s", self.url)
        try:
            self._ws = await self._http.ws_connect(self.url)
        except (aiohttp.ClientError, OSError) as exc:
            raise TaTransportError(f"Websocket connect to {self.url} failed: {exc}", url=self.url) from exc

    async def close(self) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            return
        await ws.close()
        _logger.debug("Websocket closed code=%s", ws.close_code)

    async def send_packet(self, packet: Packet) -> None:
        """Serialize *packet* and send it as one text frame."""
        ws = self._ws
        if ws is None or ws.closed:
            raise TaTransportError("Websocket is not open", url=self.url)
        try:
            await ws.send_str(packet.to_wire())
        except (aiohttp.ClientError, ConnectionResetError) as exc:
            raise TaTransportError(f"Send to {self.url} failed: {exc}", url=self.url) from exc

    async def messages(self) -> AsyncIterator[str | bytes]:
        """Yield text and binary frame payloads until the socket closes.

        The close reason, if the server sent one, is left in ``close_reason``.
        """
        ws = self._ws
        if ws is None:
            raise TaTransportError("Websocket is not open", url=self.url)
        self.close_reason = ""
        while True:
            msg = await ws.receive()
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                self.close_reason = str(ws.exception() or msg.data or "")
                _logger.debug("Websocket error: %s", self.close_reason)
                return
            elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                self.close_reason = str(msg.extra or "")
                return

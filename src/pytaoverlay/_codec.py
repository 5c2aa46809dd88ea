"""Text <-> packet conversion for the relay websocket."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from pytaoverlay._constants import HEARTBEAT_COMMAND_TYPE, ZERO_GUID
from pytaoverlay.exceptions import TaDecodeError
from pytaoverlay.models.packet import CommandPacket, Packet, PacketType

_PAYLOAD_PREVIEW = 200


def decode_packet(data: str | bytes | bytearray) -> Packet:
    """Parse one websocket message into a :class:`Packet`.

    Raises
    ------
    TaDecodeError
        When the message is not UTF-8 JSON, not an object, or does not
        validate as a packet envelope.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TaDecodeError("Packet is not valid UTF-8", payload=repr(bytes(data[:_PAYLOAD_PREVIEW]))) from exc
    else:
        text = data

    preview = text[:_PAYLOAD_PREVIEW]
    try:
        parsed: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TaDecodeError(f"Packet is not JSON: {exc}", payload=preview) from exc
    if not isinstance(parsed, dict):
        raise TaDecodeError("Packet is not a JSON object", payload=preview)

    try:
        return Packet.model_validate(parsed)
    except ValidationError as exc:
        raise TaDecodeError(
            f"Packet failed validation ({exc.error_count()} errors): {exc.errors()[0]['msg']}",
            payload=preview,
        ) from exc


def build_heartbeat_packet() -> Packet:
    """Keepalive command sent by the overlay while the socket is open."""
    return Packet(
        id=ZERO_GUID,
        from_=ZERO_GUID,
        size=0,
        specific_packet_size=0,
        type=PacketType.COMMAND,
        specific_packet=CommandPacket(command_type=HEARTBEAT_COMMAND_TYPE),
    )

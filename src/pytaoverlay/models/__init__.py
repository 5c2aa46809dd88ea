"""Data models for relay packets."""

from pytaoverlay.models._base import TaBaseModel, TaEnum
from pytaoverlay.models.packet import (
    CommandPacket,
    ConnectPacket,
    ConnectType,
    Coordinator,
    EventPacket,
    EventType,
    ForwardingPacket,
    Match,
    OpaquePacket,
    Packet,
    PacketType,
    Player,
    SongFinishedPacket,
    SpecificPacket,
    parse_specific_packet,
)

__all__ = [
    "CommandPacket",
    "ConnectPacket",
    "ConnectType",
    "Coordinator",
    "EventPacket",
    "EventType",
    "ForwardingPacket",
    "Match",
    "OpaquePacket",
    "Packet",
    "PacketType",
    "Player",
    "SongFinishedPacket",
    "SpecificPacket",
    "TaBaseModel",
    "TaEnum",
    "parse_specific_packet",
]

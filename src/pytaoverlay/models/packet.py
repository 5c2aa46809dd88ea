"""Relay packet models.

The relay wraps every message in a :class:`Packet` envelope whose ``Type``
selects the shape of ``SpecificPacket``. Forwarding packets nest a second
typed payload, and event packets select the shape of ``ChangedObject`` from
their own ``Type``. Decoding picks the concrete model for each level here,
so the dispatcher only ever sees typed objects.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, model_validator

from pytaoverlay.models._base import TaBaseModel, TaEnum, WireNumber, WireText, pick

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class PacketType(TaEnum):
    """Envelope type tag."""

    UNKNOWN = -1
    ACKNOWLEDGEMENT = 0
    COMMAND = 1
    CONNECT = 2
    CONNECT_RESPONSE = 3
    EVENT = 4
    FILE = 5
    FORWARDING_PACKET = 6
    LOADED_SONG = 7
    LOAD_SONG = 8
    PLAY_SONG = 9
    RESPONSE = 10
    SCORE_REQUEST = 11
    SCORE_REQUEST_RESPONSE = 12
    SONG_FINISHED = 13
    SONG_LIST = 14
    SUBMIT_SCORE = 15


class EventType(TaEnum):
    """Event packet type tag (flag values, one per event)."""

    UNKNOWN = -1
    COORDINATOR_ADDED = 1
    COORDINATOR_LEFT = 2
    MATCH_CREATED = 4
    MATCH_UPDATED = 8
    MATCH_DELETED = 16
    PLAYER_ADDED = 32
    PLAYER_UPDATED = 64
    PLAYER_LEFT = 128
    QUALIFIER_EVENT_CREATED = 256
    QUALIFIER_EVENT_UPDATED = 512
    QUALIFIER_EVENT_DELETED = 1024
    HOST_ADDED = 2048
    HOST_REMOVED = 4096


class ConnectType(TaEnum):
    """Kind of client announcing itself in a ``Connect`` packet."""

    UNKNOWN = -1
    PLAYER = 0
    COORDINATOR = 1
    TEMPORARY_CONNECTION = 2


PacketTypeField = Annotated[PacketType, BeforeValidator(PacketType.coerce)]
EventTypeField = Annotated[EventType, BeforeValidator(EventType.coerce)]
ConnectTypeField = Annotated[ConnectType, BeforeValidator(ConnectType.coerce)]

# ------------------------------------------------------------------
# Roster objects
# ------------------------------------------------------------------


class Coordinator(TaBaseModel):
    """An event operator connected to the relay."""

    id: str
    name: WireText = ""


class Player(TaBaseModel):
    """A player connected to the relay.

    Only ``id`` is required. Gameplay fields are display-only: numbers that
    do not parse become ``None``, state fields pass through untouched, and
    the full payload stays in ``raw``.
    """

    id: str
    name: WireText = ""
    user_id: Any = None
    play_state: Any = None
    download_state: Any = None
    score: WireNumber = None
    combo: WireNumber = None
    accuracy: WireNumber = None
    song_position: WireNumber = None


def _parse_slots(value: Any) -> Any:
    if not isinstance(value, list):
        return []
    return [slot if isinstance(slot, (dict, Player)) else None for slot in value]


class Match(TaBaseModel):
    """A match hosted by a coordinator."""

    guid: WireText = ""
    leader: Coordinator
    players: Annotated[list[Player | None], BeforeValidator(_parse_slots)] = Field(default_factory=list)
    selected_difficulty: Any = None


# ------------------------------------------------------------------
# Specific packets
# ------------------------------------------------------------------

_CHANGED_OBJECT_MODELS: dict[EventType, type[TaBaseModel]] = {
    EventType.COORDINATOR_ADDED: Coordinator,
    EventType.COORDINATOR_LEFT: Coordinator,
    EventType.MATCH_CREATED: Match,
    EventType.MATCH_UPDATED: Match,
    EventType.MATCH_DELETED: Match,
    EventType.PLAYER_ADDED: Player,
    EventType.PLAYER_UPDATED: Player,
    EventType.PLAYER_LEFT: Player,
}


class EventPacket(TaBaseModel):
    """Roster/match change. ``changed_object`` is ``None`` for unmodelled event types."""

    type: EventTypeField = EventType.UNKNOWN
    changed_object: Coordinator | Match | Player | None = None

    @model_validator(mode="before")
    @classmethod
    def _decode_changed_object(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        working = dict(values)
        working.setdefault("raw", dict(values))
        event_type = EventType.coerce(pick(values, "Type", "type"))
        key = "ChangedObject" if "ChangedObject" in working else "changed_object"
        obj = working.get(key)
        model = _CHANGED_OBJECT_MODELS.get(event_type)
        if model is None:
            working[key] = None
        elif isinstance(obj, dict):
            working[key] = model.model_validate(obj)
        return working


class SongFinishedPacket(TaBaseModel):
    """A player finished a song; ``user`` is the player's final snapshot."""

    user: Player
    score: WireNumber = None


class ConnectPacket(TaBaseModel):
    """A client announcing itself to the relay."""

    client_type: ConnectTypeField = ConnectType.UNKNOWN
    password: WireText = ""
    name: WireText = ""
    client_version: WireNumber = None


class CommandPacket(TaBaseModel):
    """Relay command. The overlay only sends these (heartbeats)."""

    command_type: int = 0


class OpaquePacket(TaBaseModel):
    """Payload of a packet type this library does not model; see ``raw``."""


class ForwardingPacket(TaBaseModel):
    """A packet relayed to a subset of clients listed in ``forward_to``."""

    type: PacketTypeField = PacketType.UNKNOWN
    forward_to: list[str] = Field(default_factory=list)
    specific_packet: SpecificPacket

    @model_validator(mode="before")
    @classmethod
    def _decode_nested(cls, values: Any) -> Any:
        return _decode_specific_packet(values)


SpecificPacket = EventPacket | ForwardingPacket | SongFinishedPacket | ConnectPacket | CommandPacket | OpaquePacket

_SPECIFIC_PACKET_MODELS: dict[PacketType, type[TaBaseModel]] = {
    PacketType.EVENT: EventPacket,
    PacketType.FORWARDING_PACKET: ForwardingPacket,
    PacketType.SONG_FINISHED: SongFinishedPacket,
    PacketType.CONNECT: ConnectPacket,
    PacketType.COMMAND: CommandPacket,
}


def parse_specific_packet(packet_type: PacketType, value: Any) -> SpecificPacket:
    """Validate *value* as the payload model selected by *packet_type*."""
    if isinstance(value, TaBaseModel):
        return value  # type: ignore[return-value]
    model = _SPECIFIC_PACKET_MODELS.get(packet_type, OpaquePacket)
    if model is OpaquePacket and not isinstance(value, dict):
        return OpaquePacket(raw={"value": value} if value is not None else {})
    return model.model_validate(value if value is not None else {})  # type: ignore[return-value]


def _decode_specific_packet(values: Any) -> Any:
    if not isinstance(values, dict):
        return values
    working = dict(values)
    working.setdefault("raw", dict(values))
    packet_type = PacketType.coerce(pick(values, "Type", "type"))
    key = "SpecificPacket" if "SpecificPacket" in working else "specific_packet"
    working[key] = parse_specific_packet(packet_type, working.get(key))
    return working


class Packet(TaBaseModel):
    """Envelope of every relay message."""

    id: str = ""
    from_: str = Field(default="", alias="From")
    size: int = 0
    specific_packet_size: int = 0
    type: PacketTypeField = PacketType.UNKNOWN
    specific_packet: SpecificPacket

    @model_validator(mode="before")
    @classmethod
    def _decode_nested(cls, values: Any) -> Any:
        return _decode_specific_packet(values)

    def to_wire(self) -> str:
        """Serialize to the relay's JSON text form."""
        return self.model_dump_json(by_alias=True)


ForwardingPacket.model_rebuild()
Packet.model_rebuild()

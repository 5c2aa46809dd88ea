"""Tests for packet decoding with TaBaseModel + TaEnum."""

from __future__ import annotations

import json

import pytest

from pytaoverlay._codec import build_heartbeat_packet, decode_packet
from pytaoverlay.exceptions import TaDecodeError
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
)


def _envelope(packet_type: object, specific: object) -> dict:
    return {
        "Id": "9f0c1e4a-0000-0000-0000-000000000001",
        "From": "9f0c1e4a-0000-0000-0000-0000000000ff",
        "Size": 0,
        "SpecificPacketSize": 0,
        "Type": packet_type,
        "SpecificPacket": specific,
    }


# ------------------------------------------------------------------
# TaEnum
# ------------------------------------------------------------------


class TestTaEnum:
    def test_unknown_value_falls_back(self) -> None:
        assert PacketType(99) == PacketType.UNKNOWN
        assert EventType(3) == EventType.UNKNOWN

    def test_known_value(self) -> None:
        assert PacketType(4) == PacketType.EVENT
        assert EventType(64) == EventType.PLAYER_UPDATED
        assert ConnectType(1) == ConnectType.COORDINATOR

    def test_member_names_accepted(self) -> None:
        assert PacketType.coerce("ForwardingPacket") == PacketType.FORWARDING_PACKET
        assert EventType.coerce("player_left") == EventType.PLAYER_LEFT
        assert ConnectType.coerce("Coordinator") == ConnectType.COORDINATOR
        assert PacketType.coerce("13") == PacketType.SONG_FINISHED

    def test_all_enums_have_unknown(self) -> None:
        for cls in (PacketType, EventType, ConnectType):
            assert cls.UNKNOWN == -1, f"{cls.__name__}.UNKNOWN != -1"


# ------------------------------------------------------------------
# Envelope decoding
# ------------------------------------------------------------------


class TestPacketDecoding:
    def test_event_player_added(self) -> None:
        packet = Packet.model_validate(
            _envelope(4, {"Type": 32, "ChangedObject": {"Id": "p1", "Name": "Alice", "Team": {"Id": "t1"}}})
        )

        assert packet.type == PacketType.EVENT
        assert packet.from_ == "9f0c1e4a-0000-0000-0000-0000000000ff"
        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        assert event.type == EventType.PLAYER_ADDED
        player = event.changed_object
        assert isinstance(player, Player)
        assert player.id == "p1"
        assert player.name == "Alice"
        # Unmodelled fields survive in raw.
        assert player.raw["Team"] == {"Id": "t1"}

    def test_event_coordinator_shape(self) -> None:
        packet = Packet.model_validate(_envelope(4, {"Type": 1, "ChangedObject": {"Id": "c1", "Name": "Host"}}))

        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        assert isinstance(event.changed_object, Coordinator)
        assert event.changed_object.name == "Host"

    def test_event_match_with_empty_slots(self) -> None:
        packet = Packet.model_validate(
            _envelope(
                4,
                {
                    "Type": 4,
                    "ChangedObject": {
                        "Guid": "m1",
                        "Leader": {"Id": "c1", "Name": "Host"},
                        "Players": [{"Id": "p1", "Score": 10}, None],
                    },
                },
            )
        )

        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        match = event.changed_object
        assert isinstance(match, Match)
        assert match.leader.id == "c1"
        assert match.players[0] is not None and match.players[0].score == 10
        assert match.players[1] is None

    def test_unmodelled_event_type_has_no_changed_object(self) -> None:
        packet = Packet.model_validate(_envelope(4, {"Type": 256, "ChangedObject": {"EventId": "q1"}}))

        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        assert event.type == EventType.QUALIFIER_EVENT_CREATED
        assert event.changed_object is None
        assert event.raw["ChangedObject"] == {"EventId": "q1"}

    def test_forwarding_packet_nested_event(self) -> None:
        packet = Packet.model_validate(
            _envelope(
                6,
                {
                    "Type": 4,
                    "ForwardTo": ["c1", "c2"],
                    "SpecificPacket": {"Type": 64, "ChangedObject": {"Id": "p1", "Score": 1234}},
                },
            )
        )

        forwarding = packet.specific_packet
        assert isinstance(forwarding, ForwardingPacket)
        assert forwarding.forward_to == ["c1", "c2"]
        nested = forwarding.specific_packet
        assert isinstance(nested, EventPacket)
        assert isinstance(nested.changed_object, Player)
        assert nested.changed_object.score == 1234

    @pytest.mark.parametrize(
        ("changed_object", "field", "expected"),
        [
            ({"Id": "p1", "Score": 12.5}, "score", 12.5),
            ({"Id": "p1", "Score": "300"}, "score", 300),
            ({"Id": "p1", "Score": "n/a"}, "score", None),
            ({"Id": "p1", "Accuracy": {"bad": 1}}, "accuracy", None),
            ({"Id": "p1", "Name": None}, "name", ""),
            ({"Id": "p1", "PlayState": "InGame"}, "play_state", "InGame"),
            ({"Id": "p1", "UserId": 76561198000000000}, "user_id", 76561198000000000),
        ],
    )
    def test_player_display_fields_are_lenient(self, changed_object: dict, field: str, expected: object) -> None:
        packet = decode_packet(json.dumps(_envelope(4, {"Type": 64, "ChangedObject": changed_object})))

        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        player = event.changed_object
        assert isinstance(player, Player)
        assert player.id == "p1"
        assert getattr(player, field) == expected
        assert player.raw == changed_object

    def test_match_display_fields_are_lenient(self) -> None:
        packet = decode_packet(
            json.dumps(
                _envelope(
                    4,
                    {
                        "Type": 8,
                        "ChangedObject": {
                            "Guid": None,
                            "Leader": {"Id": "c1", "Name": None},
                            "Players": [{"Id": "p1"}, "garbage"],
                            "SelectedDifficulty": "ExpertPlus",
                        },
                    },
                )
            )
        )

        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        match = event.changed_object
        assert isinstance(match, Match)
        assert match.guid == ""
        assert match.leader.name == ""
        assert match.players[0] is not None and match.players[0].id == "p1"
        assert match.players[1] is None
        assert match.selected_difficulty == "ExpertPlus"

    def test_match_with_null_players_has_no_slots(self) -> None:
        match = Match.model_validate({"Leader": {"Id": "c1"}, "Players": None})
        assert match.players == []

    def test_song_finished(self) -> None:
        packet = Packet.model_validate(_envelope(13, {"User": {"Id": "p1", "Score": 99}, "Score": 99}))

        song = packet.specific_packet
        assert isinstance(song, SongFinishedPacket)
        assert song.user.id == "p1"

    def test_connect(self) -> None:
        packet = Packet.model_validate(
            _envelope(2, {"ClientType": 1, "Password": "secret", "Name": "Host", "ClientVersion": 46})
        )

        connect = packet.specific_packet
        assert isinstance(connect, ConnectPacket)
        assert connect.client_type == ConnectType.COORDINATOR
        assert connect.name == "Host"
        assert connect.client_version == 46

    def test_command(self) -> None:
        packet = Packet.model_validate(_envelope(1, {"CommandType": 0}))
        assert isinstance(packet.specific_packet, CommandPacket)

    def test_string_type_tags(self) -> None:
        packet = Packet.model_validate(
            _envelope("Event", {"Type": "CoordinatorLeft", "ChangedObject": {"Id": "c1", "Name": "Host"}})
        )

        assert packet.type == PacketType.EVENT
        event = packet.specific_packet
        assert isinstance(event, EventPacket)
        assert event.type == EventType.COORDINATOR_LEFT

    def test_unknown_type_is_opaque(self) -> None:
        packet = Packet.model_validate(_envelope(77, {"Whatever": True}))

        assert packet.type == PacketType.UNKNOWN
        assert isinstance(packet.specific_packet, OpaquePacket)
        assert packet.specific_packet.raw == {"Whatever": True}

    def test_known_but_unmodelled_type_is_opaque(self) -> None:
        packet = Packet.model_validate(_envelope(0, {"PacketId": "x"}))

        assert packet.type == PacketType.ACKNOWLEDGEMENT
        assert isinstance(packet.specific_packet, OpaquePacket)


# ------------------------------------------------------------------
# Codec
# ------------------------------------------------------------------


class TestCodec:
    def test_decode_text(self) -> None:
        packet = decode_packet(json.dumps(_envelope(1, {"CommandType": 0})))
        assert packet.type == PacketType.COMMAND

    def test_decode_bytes(self) -> None:
        packet = decode_packet(json.dumps(_envelope(1, {"CommandType": 0})).encode("utf-8"))
        assert packet.type == PacketType.COMMAND

    @pytest.mark.parametrize(
        "message",
        [
            "not json",
            "[1, 2, 3]",
            json.dumps(_envelope(13, {"Score": 1})),
            json.dumps(_envelope(4, {"Type": 32, "ChangedObject": {"Name": "no id"}})),
            b"\xff\xfe",
        ],
    )
    def test_decode_failures_raise_decode_error(self, message: str | bytes) -> None:
        with pytest.raises(TaDecodeError):
            decode_packet(message)

    def test_heartbeat_wire_shape(self) -> None:
        wire = json.loads(build_heartbeat_packet().to_wire())

        assert wire == {
            "Id": "00000000-0000-0000-0000-000000000000",
            "From": "00000000-0000-0000-0000-000000000000",
            "Size": 0,
            "SpecificPacketSize": 0,
            "Type": 1,
            "SpecificPacket": {"CommandType": 0},
        }

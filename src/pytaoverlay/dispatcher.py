"""Packet dispatch and state reconciliation.

:class:`PacketDispatcher` is the only component that mutates the
:class:`~pytaoverlay.state.store.OverlayStore`. It applies exactly one rule
per packet, selected by the envelope type and (for events and forwarded
packets) the nested type:

- events upsert/remove players and coordinators and track the main
  coordinator's match;
- forwarded ``PlayerUpdated`` events become ``score_update`` notifications;
- ``SongFinished`` refreshes the finishing player;
- an authenticated coordinator ``Connect`` selects the main coordinator.

Coordinator selection never blocks. When the connecting coordinator's name
is not in the roster yet, the request is parked until a ``CoordinatorAdded``
event with that name arrives, or until its deadline passes, at which point
a :class:`~pytaoverlay.exceptions.TaResolutionTimeoutError` is published on
the ``error`` channel.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

from pytaoverlay._constants import RESOLUTION_TIMEOUT_SECONDS, ZERO_GUID
from pytaoverlay.exceptions import TaResolutionTimeoutError
from pytaoverlay.models.packet import (
    ConnectPacket,
    ConnectType,
    Coordinator,
    EventPacket,
    EventType,
    ForwardingPacket,
    Match,
    Packet,
    PacketType,
    Player,
    SongFinishedPacket,
)
from pytaoverlay.overlay_log import LogSeverity, OverlayLog
from pytaoverlay.state.notifier import Notifier
from pytaoverlay.state.store import OverlayStore


@dataclass(slots=True)
class _PendingConnect:
    """A coordinator ``Connect`` waiting for its name to join the roster."""

    name: str
    deadline: float


class PacketDispatcher:
    def __init__(
        self,
        *,
        store: OverlayStore,
        notifier: Notifier,
        log: OverlayLog,
        password: str,
        resolution_timeout: float = RESOLUTION_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._log = log
        self._password = password
        self._resolution_timeout = resolution_timeout
        self._clock = clock
        self._pending: dict[str, _PendingConnect] = {}
        # Subscribed first so the store is updated before consumers see the score.
        notifier.score_update.subscribe(self._on_score_update)

    @property
    def pending_connects(self) -> tuple[str, ...]:
        """Names of coordinator connects still waiting to resolve."""
        return tuple(self._pending)

    def next_deadline(self) -> float | None:
        """Earliest pending resolution deadline on the dispatcher clock."""
        if not self._pending:
            return None
        return min(pending.deadline for pending in self._pending.values())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, packet: Packet) -> None:
        """Apply one decoded packet to the store."""
        self.expire_pending_connects()

        specific = packet.specific_packet
        if packet.type == PacketType.EVENT and isinstance(specific, EventPacket):
            self._process_event(specific)
        elif packet.type == PacketType.FORWARDING_PACKET and isinstance(specific, ForwardingPacket):
            self._process_forwarding(specific)
        elif packet.type == PacketType.SONG_FINISHED and isinstance(specific, SongFinishedPacket):
            self._store.set_player(specific.user)
        elif packet.type == PacketType.CONNECT and isinstance(specific, ConnectPacket):
            self._process_connect(specific)
        elif packet.type == PacketType.COMMAND:
            # Commands drive players' game clients; nothing to mirror.
            return
        else:
            self._log("Not handled", LogSeverity.WARN)

    def _process_event(self, event: EventPacket) -> None:
        obj = event.changed_object
        event_type = event.type

        if event_type in (EventType.PLAYER_ADDED, EventType.PLAYER_UPDATED) and isinstance(obj, Player):
            self._store.set_player(obj)
        elif event_type == EventType.PLAYER_LEFT and isinstance(obj, Player):
            self._store.delete_player(obj.id)
        elif event_type == EventType.COORDINATOR_ADDED and isinstance(obj, Coordinator):
            self._store.set_coordinator(obj.id, obj.name)
            self._resolve_pending(obj.name)
        elif event_type == EventType.COORDINATOR_LEFT and isinstance(obj, Coordinator):
            self._store.delete_coordinator(obj.id)
            if obj.id == self._store.main_coordinator:
                self._store.set_main_coordinator(None)
        elif event_type in (EventType.MATCH_CREATED, EventType.MATCH_UPDATED) and isinstance(obj, Match):
            if self._is_main_match(obj):
                self._store.set_main_match(obj)
            else:
                self._store.notify_match_changed()
        elif event_type == EventType.MATCH_DELETED and isinstance(obj, Match):
            if self._is_main_match(obj):
                self._store.set_main_match(None)
            else:
                self._store.notify_match_changed()

    def _process_forwarding(self, forwarding: ForwardingPacket) -> None:
        nested = forwarding.specific_packet
        if forwarding.type != PacketType.EVENT or not isinstance(nested, EventPacket):
            return
        if nested.type == EventType.PLAYER_UPDATED and isinstance(nested.changed_object, Player):
            self._notifier.score_update.emit(list(forwarding.forward_to), nested.changed_object)

    def _is_main_match(self, match: Match) -> bool:
        main = self._store.main_coordinator
        return main is not None and match.leader.id == main

    # ------------------------------------------------------------------
    # Main coordinator resolution
    # ------------------------------------------------------------------

    def _process_connect(self, connect: ConnectPacket) -> None:
        if connect.client_type != ConnectType.COORDINATOR:
            return
        if not secrets.compare_digest(connect.password.encode(), self._password.encode()):
            return
        if self._store.main_coordinator is not None:
            return

        coordinator_id = self._store.coordinator_id_for_name(connect.name)
        if coordinator_id is not None:
            self._select_main_coordinator(coordinator_id)
            return

        self._pending[connect.name] = _PendingConnect(
            name=connect.name,
            deadline=self._clock() + self._resolution_timeout,
        )
        self._log(f"Waiting for coordinator {connect.name!r} to join", LogSeverity.DEBUG)

    def _resolve_pending(self, name: str) -> None:
        if self._pending.pop(name, None) is None:
            return
        if self._store.main_coordinator is not None:
            return
        coordinator_id = self._store.coordinator_id_for_name(name)
        if coordinator_id is not None:
            self._select_main_coordinator(coordinator_id)

    def _select_main_coordinator(self, coordinator_id: str) -> None:
        # First connect wins; anything still parked can no longer succeed.
        self._pending.clear()
        self._store.set_main_coordinator(coordinator_id)

    def expire_pending_connects(self) -> int:
        """Fail every parked connect whose deadline has passed; return how many."""
        if not self._pending:
            return 0
        now = self._clock()
        expired = [pending for pending in self._pending.values() if now >= pending.deadline]
        for pending in expired:
            del self._pending[pending.name]
            error = TaResolutionTimeoutError(pending.name, timeout=self._resolution_timeout)
            self._log(str(error), LogSeverity.ERROR)
            self._notifier.error.emit(error)
        return len(expired)

    # ------------------------------------------------------------------
    # Score updates
    # ------------------------------------------------------------------

    def _on_score_update(self, forward_to: list[str], player: Player) -> None:
        main = self._store.main_coordinator
        if main is None or main not in forward_to:
            return

        self.dispatch(
            Packet(
                id=main,
                from_=ZERO_GUID,
                type=PacketType.EVENT,
                specific_packet=EventPacket(type=EventType.PLAYER_UPDATED, changed_object=player),
            )
        )

        match = self._store.main_match
        if match is None:
            return
        players = [self._store.get_player(slot.id) if slot is not None else None for slot in match.players]
        self._store.set_main_match(match.model_copy(update={"players": players}))

"""In-memory mirror of the relay's roster and the main coordinator's match.

Only the dispatcher mutates this store. Readers get copies of the maps and
frozen models, never live views.
"""

from __future__ import annotations

from pytaoverlay.models.packet import Match, Player
from pytaoverlay.state.notifier import Notifier


class OverlayStore:
    """Coordinator/player maps plus the main coordinator and main match.

    Every operation is synchronous and total: getting or deleting an absent
    key returns ``None`` / does nothing.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier
        self._coordinators: dict[str, str] = {}
        self._players: dict[str, Player] = {}
        self._main_coordinator: str | None = None
        self._main_match: Match | None = None

    # ------------------------------------------------------------------
    # Coordinators
    # ------------------------------------------------------------------

    @property
    def coordinators(self) -> dict[str, str]:
        return dict(self._coordinators)

    def get_coordinator(self, coordinator_id: str) -> str | None:
        return self._coordinators.get(coordinator_id)

    def set_coordinator(self, coordinator_id: str, name: str) -> None:
        self._coordinators[coordinator_id] = name

    def delete_coordinator(self, coordinator_id: str) -> None:
        self._coordinators.pop(coordinator_id, None)

    def coordinator_id_for_name(self, name: str) -> str | None:
        """Reverse lookup: first coordinator id (insertion order) whose name equals *name*."""
        for coordinator_id, coordinator_name in self._coordinators.items():
            if coordinator_name == name:
                return coordinator_id
        return None

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    @property
    def players(self) -> dict[str, Player]:
        return dict(self._players)

    def get_player(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def set_player(self, player: Player) -> None:
        self._players[player.id] = player

    def delete_player(self, player_id: str) -> None:
        self._players.pop(player_id, None)

    # ------------------------------------------------------------------
    # Main coordinator / match
    # ------------------------------------------------------------------

    @property
    def main_coordinator(self) -> str | None:
        return self._main_coordinator

    def set_main_coordinator(self, coordinator_id: str | None) -> None:
        """Set (or unset with ``None``) the main coordinator and notify.

        A main match led by anyone else is cleared afterwards, so the main
        match is always absent or led by the main coordinator.
        """
        self._main_coordinator = coordinator_id
        self._notifier.coordinator_changed.emit(coordinator_id)
        match = self._main_match
        if match is not None and match.leader.id != coordinator_id:
            self.set_main_match(None)

    @property
    def main_match(self) -> Match | None:
        return self._main_match

    def set_main_match(self, match: Match | None) -> None:
        """Replace (or clear with ``None``) the main match and notify."""
        self._main_match = match
        self._notifier.match_changed.emit(match)

    def notify_match_changed(self) -> None:
        """Re-announce the current main match without changing it."""
        self._notifier.match_changed.emit(self._main_match)

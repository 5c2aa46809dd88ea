"""Typed notification channels.

Each notification kind gets its own :class:`Channel` whose callback
signature is fixed, so subscribers are checked statically instead of
dispatching on event-name strings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, ParamSpec

if TYPE_CHECKING:
    from pytaoverlay.exceptions import TaError
    from pytaoverlay.models.packet import Match, Player

_logger = logging.getLogger(__name__)

P = ParamSpec("P")


class Channel(Generic[P]):
    """Synchronous same-thread publish/subscribe channel.

    Subscribers are called in subscription order. Emission walks a snapshot
    of the subscriber list, so a callback may subscribe, unsubscribe or emit
    again (on any channel) while it runs.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Callable[P, None]] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[P, None]) -> Callable[[], None]:
        """Register *callback* and return a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: Callable[P, None]) -> None:
        """Remove the first registration of *callback*; unknown callbacks are ignored."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            return

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        for callback in list(self._subscribers):
            try:
                callback(*args, **kwargs)
            except Exception:
                _logger.debug("%s subscriber %r failed", self.name, callback, exc_info=True)


class Notifier:
    """The fixed set of channels surfaced to overlay consumers."""

    def __init__(self) -> None:
        self.coordinator_changed: Channel[[str | None]] = Channel("coordinator_changed")
        self.match_changed: Channel[[Match | None]] = Channel("match_changed")
        self.score_update: Channel[[list[str], Player]] = Channel("score_update")
        self.log: Channel[[str]] = Channel("log")
        self.error: Channel[[TaError]] = Channel("error")

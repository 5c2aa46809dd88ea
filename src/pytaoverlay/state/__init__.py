"""State/store layer.

This package is the single source of truth for the mirrored relay state:
the coordinator and player rosters, the main coordinator and its match, and
the channels that announce changes to them.
"""

from pytaoverlay.state.notifier import Channel, Notifier
from pytaoverlay.state.store import OverlayStore

__all__ = ["Channel", "Notifier", "OverlayStore"]

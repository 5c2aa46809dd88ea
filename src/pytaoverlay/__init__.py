"""pytaoverlay - Async Python client mirroring tournament relay state for broadcast overlays."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytaoverlay")
except PackageNotFoundError:
    __version__ = "0+local"
from pytaoverlay.client import TaClient
from pytaoverlay.config import TaConfig
from pytaoverlay.dispatcher import PacketDispatcher
from pytaoverlay.exceptions import (
    TaConfigError,
    TaDecodeError,
    TaError,
    TaResolutionTimeoutError,
    TaTransportError,
)
from pytaoverlay.models import (
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
from pytaoverlay.overlay_log import LogSeverity, OverlayLog
from pytaoverlay.state import Channel, Notifier, OverlayStore

__all__ = [
    "__version__",
    "Channel",
    "CommandPacket",
    "ConnectPacket",
    "ConnectType",
    "Coordinator",
    "EventPacket",
    "EventType",
    "ForwardingPacket",
    "LogSeverity",
    "Match",
    "Notifier",
    "OpaquePacket",
    "OverlayLog",
    "OverlayStore",
    "Packet",
    "PacketDispatcher",
    "PacketType",
    "Player",
    "SongFinishedPacket",
    "TaClient",
    "TaConfig",
    "TaConfigError",
    "TaDecodeError",
    "TaError",
    "TaResolutionTimeoutError",
    "TaTransportError",
]

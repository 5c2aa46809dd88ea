"""Custom exception hierarchy for pytaoverlay."""

from __future__ import annotations


class TaError(Exception):
    """Base exception for all pytaoverlay errors."""


class TaConfigError(TaError):
    """Invalid or missing configuration."""


class TaTransportError(TaError):
    """Websocket-level failure (connect failure, socket used before open)."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class TaDecodeError(TaError):
    """Inbound message could not be decoded into a packet.

    The offending message is kept (truncated) on ``payload`` so it can be
    inspected by subscribers of the ``error`` channel.
    """

    def __init__(self, message: str, *, payload: str = "") -> None:
        self.payload = payload
        super().__init__(message)


class TaResolutionTimeoutError(TaError):
    """A coordinator ``Connect`` whose name never appeared in the roster.

    Raised into the ``error`` channel when no ``CoordinatorAdded`` event with
    a matching name arrives within the configured resolution timeout.
    """

    def __init__(self, name: str, *, timeout: float) -> None:
        self.name = name
        self.timeout = timeout
        super().__init__(f"Coordinator {name!r} did not resolve within {timeout:.1f}s")

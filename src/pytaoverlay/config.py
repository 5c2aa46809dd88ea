"""Client configuration for pytaoverlay."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pytaoverlay._constants import (
    DEFAULT_COORDINATOR_PASSWORD,
    DEFAULT_HOST,
    DEFAULT_PORT,
    HEARTBEAT_INTERVAL_SECONDS,
    RESOLUTION_TIMEOUT_SECONDS,
)
from pytaoverlay.exceptions import TaConfigError
from pytaoverlay.overlay_log import LogSeverity


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_severity(value: str) -> LogSeverity:
    normalized = value.strip()
    try:
        if normalized.lstrip("-").isdigit():
            return LogSeverity(int(normalized))
        return LogSeverity[normalized.upper()]
    except (KeyError, ValueError) as exc:
        raise TaConfigError(f"Unknown log severity: {value!r}") from exc


def _env_number(key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value.strip())
    except ValueError as exc:
        raise TaConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TaConfig:
    """Client configuration.

    Parameters
    ----------
    host : str
        Relay server host name.
    port : int
        Relay server websocket port.
    password : str or None
        Shared secret a coordinator must present in its ``Connect`` packet
        to become the main coordinator mirrored by this client.
    allow_default_password : bool
        Accept the relay's well-known fallback secret when ``password`` is
        unset. Off by default so an unconfigured client fails loudly.
    log_enabled : bool
        Emit formatted entries on the ``log`` channel.
    log_severity : LogSeverity
        Minimum severity that reaches the ``log`` channel.
    heartbeat_enabled : bool
        Send keepalive command packets while the socket is open.
    heartbeat_interval : float
        Seconds between heartbeats.
    resolution_timeout : float
        Seconds a coordinator ``Connect`` may wait for its name to appear in
        the roster before it fails with ``TaResolutionTimeoutError``.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    password: str | None = None
    allow_default_password: bool = False
    log_enabled: bool = False
    log_severity: LogSeverity = LogSeverity.INFO
    heartbeat_enabled: bool = False
    heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS
    resolution_timeout: float = RESOLUTION_TIMEOUT_SECONDS

    @property
    def url(self) -> str:
        """Websocket URL of the relay server."""
        return f"ws://{self.host}:{self.port}"

    def effective_password(self) -> str:
        """Return the coordinator secret to authenticate against.

        Raises
        ------
        TaConfigError
            When no password is configured and the fallback secret was not
            explicitly allowed.
        """
        if self.password:
            return self.password
        if self.allow_default_password:
            return DEFAULT_COORDINATOR_PASSWORD
        raise TaConfigError(
            "No coordinator password configured (set password or allow_default_password=True)",
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> TaConfig:
        """Create configuration from environment variables.

        Reads ``TA_HOST``, ``TA_PORT``, ``TA_PASSWORD`` and the optional
        ``TA_*`` variables listed below. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TaConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        for env_key, field_name in (("TA_HOST", "host"), ("TA_PASSWORD", "password")):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        port_env = env.get("TA_PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = _env_number("TA_PORT", port_env, int)

        if "allow_default_password" not in overrides:
            config_kwargs["allow_default_password"] = _env_bool(env.get("TA_ALLOW_DEFAULT_PASSWORD"), False)
        if "log_enabled" not in overrides:
            config_kwargs["log_enabled"] = _env_bool(env.get("TA_LOG_ENABLED"), False)
        if "heartbeat_enabled" not in overrides:
            config_kwargs["heartbeat_enabled"] = _env_bool(env.get("TA_HEARTBEAT_ENABLED"), False)

        severity_env = env.get("TA_LOG_SEVERITY")
        if severity_env is not None and "log_severity" not in overrides:
            config_kwargs["log_severity"] = _env_severity(severity_env)

        interval_env = env.get("TA_HEARTBEAT_INTERVAL")
        if interval_env is not None and "heartbeat_interval" not in overrides:
            config_kwargs["heartbeat_interval"] = _env_number("TA_HEARTBEAT_INTERVAL", interval_env, float)

        timeout_env = env.get("TA_RESOLUTION_TIMEOUT")
        if timeout_env is not None and "resolution_timeout" not in overrides:
            config_kwargs["resolution_timeout"] = _env_number("TA_RESOLUTION_TIMEOUT", timeout_env, float)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

#!/usr/bin/env python3
"""Passive overlay probe for a tournament relay server.

Connects with pytaoverlay and prints every notification the overlay would
render: main coordinator changes, main match changes and score updates.
Use this to check that a relay is reachable and that the coordinator
password selects the expected main coordinator.

Configuration is read from ``TA_*`` environment variables (see
``TaConfig.from_env``); command-line flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytaoverlay import LogSeverity, Match, Player, TaClient, TaConfig, TaError  # noqa: E402

_LOG = logging.getLogger("overlay_probe")


@dataclass
class ProbeStats:
    started_at: float
    coordinator_changes: int = 0
    match_changes: int = 0
    score_updates: int = 0
    errors: list[str] = field(default_factory=list)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Passive probe for the relay overlay stream.",
    )
    parser.add_argument("--host", help="Relay host (default: TA_HOST or the public relay).")
    parser.add_argument("--port", type=int, help="Relay websocket port.")
    parser.add_argument("--password", help="Coordinator password used to pick the main coordinator.")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C or server close).",
    )
    parser.add_argument(
        "--heartbeat",
        action="store_true",
        help="Send keepalive heartbeats while connected.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs, including every decoded packet.",
    )
    return parser.parse_args()


def _describe_match(match: Match | None) -> str:
    if match is None:
        return "none"
    slots = ", ".join(_describe_player(player) for player in match.players)
    return f"{match.guid or '?'} led by {match.leader.name or match.leader.id} [{slots}]"


def _describe_player(player: Player | None) -> str:
    if player is None:
        return "-"
    score = "" if player.score is None else f" {player.score}"
    return f"{player.name or player.id}{score}"


def _print_summary(stats: ProbeStats) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s           : {runtime:.1f}")
    print(f"[probe]   coordinator_changes : {stats.coordinator_changes}")
    print(f"[probe]   match_changes       : {stats.match_changes}")
    print(f"[probe]   score_updates       : {stats.score_updates}")
    print(f"[probe]   errors              : {len(stats.errors)}")


async def _probe(config: TaConfig, duration: int, stats: ProbeStats) -> None:
    def on_coordinator_changed(coordinator_id: str | None) -> None:
        stats.coordinator_changes += 1
        print(f"[probe] main coordinator -> {coordinator_id or 'unset'}")

    def on_match_changed(match: Match | None) -> None:
        stats.match_changes += 1
        print(f"[probe] main match -> {_describe_match(match)}")

    def on_score_update(forward_to: list[str], player: Player) -> None:
        stats.score_updates += 1
        print(f"[probe] score {_describe_player(player)} -> {len(forward_to)} recipients")

    def on_error(error: TaError) -> None:
        stats.errors.append(str(error))
        print(f"[probe] error: {error}", file=sys.stderr)

    async with TaClient(
        config,
        on_coordinator_changed=on_coordinator_changed,
        on_match_changed=on_match_changed,
        on_score_update=on_score_update,
        on_error=on_error,
    ) as client:
        print(f"[probe] connected to {config.url}")
        if duration > 0:
            try:
                await asyncio.wait_for(client.run(), timeout=duration)
            except TimeoutError:
                _LOG.debug("Probe duration elapsed")
        else:
            await client.run()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {"log_enabled": True}
    overrides["log_severity"] = LogSeverity.DEBUG if args.verbose else LogSeverity.INFO
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.password:
        overrides["password"] = args.password
    if args.heartbeat:
        overrides["heartbeat_enabled"] = True

    try:
        config = TaConfig.from_env(**overrides)
    except TaError as exc:
        print(f"[probe] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    stats = ProbeStats(started_at=time.time())
    try:
        asyncio.run(_probe(config, args.duration, stats))
    except KeyboardInterrupt:
        pass
    except TaError as exc:  # pragma: no cover - network/system interaction
        print(f"[probe] Connection failed: {exc}", file=sys.stderr)
        return 2
    finally:
        _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())

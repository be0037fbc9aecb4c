"""User-tunable session settings."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SessionSettings:
    """All user-configurable session settings."""

    # Network
    server_url: str = "ws://localhost:9090/ws/websocket"

    # Clocks
    initial_clock_seconds: int = 600
    clock_tick_ms: int = 1000
    timeout_ends_game: bool = False

    # Bot
    think_delay_ms: int = 500

    # Reconciliation
    remote_default_promotion: str = "q"

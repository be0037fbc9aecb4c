"""Dual countdown clock in whole seconds.

Local ticking only smooths the display between authoritative updates:
:meth:`ClockPair.overwrite` replaces the counters outright.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from chesslink.core.enums import Color

TimeoutCallback = Callable[[Color], None]


@dataclass(frozen=True, slots=True)
class ClockSnapshot:
    """Both counters at one instant."""

    white_remaining: int
    black_remaining: int


class ClockPair:
    """Two independent non-negative second counters, one per side."""

    __slots__ = ("_remaining", "_flagged", "on_timeout")

    def __init__(self, white_seconds: int = 600, black_seconds: int = 600) -> None:
        self._remaining: dict[Color, int] = {
            Color.WHITE: max(0, int(white_seconds)),
            Color.BLACK: max(0, int(black_seconds)),
        }
        self._flagged: set[Color] = set()
        self.on_timeout: list[TimeoutCallback] = []

    def remaining(self, color: Color) -> int:
        return self._remaining[color]

    def is_flag_fallen(self, color: Color) -> bool:
        return self._remaining[color] <= 0

    def tick(self, color: Color) -> bool:
        """Take one second from *color*; True if this tick reached zero."""
        if self._remaining[color] <= 0:
            return False
        self._remaining[color] -= 1
        if self._remaining[color] == 0 and color not in self._flagged:
            self._flagged.add(color)
            for cb in self.on_timeout:
                cb(color)
            return True
        return False

    def overwrite(self, white: int | None = None, black: int | None = None) -> None:
        """Adopt remote values; ``None`` leaves that side untouched."""
        for color, value in ((Color.WHITE, white), (Color.BLACK, black)):
            if value is None:
                continue
            self._remaining[color] = max(0, int(value))
            if self._remaining[color] > 0:
                self._flagged.discard(color)

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            white_remaining=self._remaining[Color.WHITE],
            black_remaining=self._remaining[Color.BLACK],
        )

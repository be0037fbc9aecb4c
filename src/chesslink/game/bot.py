"""BotDriver — the local autonomous opponent.

The driver never talks to the oracle on its own behalf: it waits a fixed
think delay, picks one of the legal moves with a :data:`MoveSelector` and
hands it to the controller, which commits it exactly like a human move.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QTimer

from chesslink.core.move import Move
from chesslink.game.interfaces import MoveSelector, SessionPhase

if TYPE_CHECKING:
    from chesslink.game.controller import SessionController

_LOGGER = logging.getLogger(__name__)


def random_choice(moves: Sequence[Move]) -> Move:
    """Uniformly random legal move."""
    return random.choice(list(moves))


def first_legal(moves: Sequence[Move]) -> Move:
    """Deterministic choice: the first move in oracle order."""
    return moves[0]


class BotDriver:
    """Schedules one bot move per position change, after a think delay."""

    __slots__ = ("__weakref__", "_controller", "_select", "_timer")

    def __init__(
        self,
        controller: SessionController,
        *,
        think_delay_ms: int = 500,
        select: MoveSelector = random_choice,
        parent: QObject | None = None,
    ) -> None:
        self._controller = controller
        self._select = select
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, think_delay_ms))
        self._timer.timeout.connect(self._on_think_elapsed)

    @property
    def is_pending(self) -> bool:
        """A bot move is scheduled and has not fired yet."""
        return self._timer.isActive()

    def on_position_changed(self) -> None:
        """Drop any scheduled move and schedule a fresh one if it's our turn."""
        self._timer.stop()
        if self._should_move():
            self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()

    # ── Internal ─────────────────────────────────────────────────────────

    def _should_move(self) -> bool:
        controller = self._controller
        state = controller.state
        return (
            state.vs_bot
            and controller.bot_started
            and not controller.is_closed
            and state.phase == SessionPhase.ACTIVE
            and not state.is_local_turn
        )

    def _on_think_elapsed(self) -> None:
        if not self._should_move():
            return
        moves = self._controller.state.oracle.legal_moves()
        if not moves:
            return
        move = self._select(moves)
        if self._controller.submit_bot_move(move) is None:
            _LOGGER.warning("Bot move %s was rejected", move)

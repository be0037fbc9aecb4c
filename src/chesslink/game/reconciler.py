"""MoveReconciler — folds inbound room messages into the local session.

The channel offers no sequence numbers or acknowledgements, so the
reconciler relies on two anchors:

* the last entry of the move history, to recognise the local side's own
  move coming back (echo), and
* the FEN snapshot carried by move messages, to recover when the oracle
  rejects a remote move because the local position drifted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chesslink.core.enums import PieceKind
from chesslink.game.interfaces import ReconcileOutcome, TerminalSignal
from chesslink.net.protocol import DRAW, PLAYER_JOINED, RESIGN, WireMessage

if TYPE_CHECKING:
    from chesslink.game.controller import SessionController

_LOGGER = logging.getLogger(__name__)


class MoveReconciler:
    """Applies one inbound message at a time to a session controller."""

    __slots__ = ("_controller", "_default_promotion")

    def __init__(
        self,
        controller: SessionController,
        *,
        default_promotion: PieceKind = PieceKind.QUEEN,
    ) -> None:
        self._controller = controller
        self._default_promotion = default_promotion

    def handle(self, message: WireMessage) -> ReconcileOutcome:
        controller = self._controller
        state = controller.state

        sentinel = message.sentinel
        if sentinel is not None:
            return self._dispatch_sentinel(sentinel, message)

        white, black = message.reported_clocks
        if white is not None or black is not None:
            controller.overwrite_clocks(white, black)

        if state.is_finished:
            return ReconcileOutcome.IGNORED

        move = message.to_move()
        if move is None:
            if message.from_sq or message.to_sq:
                _LOGGER.warning("Ignoring message with incomplete move: %s", message)
            return ReconcileOutcome.IGNORED

        last = state.last_record
        if last is not None and move.same_squares(last.from_sq, last.to_sq):
            _LOGGER.debug("Echo of %s%s suppressed", last.from_sq, last.to_sq)
            return ReconcileOutcome.ECHO

        if move.promotion is None and state.oracle.is_promotion_move(move):
            move = move.with_promotion(self._default_promotion)

        if controller.commit_remote_move(move) is not None:
            return ReconcileOutcome.APPLIED

        snapshot = message.snapshot
        if snapshot is None:
            _LOGGER.warning(
                "Remote move %s rejected and no snapshot supplied; "
                "session may be out of sync",
                move,
            )
            controller.mark_desynced(message)
            return ReconcileOutcome.DESYNCED

        _LOGGER.warning("Remote move %s rejected; resyncing from FEN", move)
        if not controller.adopt_snapshot(snapshot):
            controller.mark_desynced(message)
            return ReconcileOutcome.DESYNCED
        return ReconcileOutcome.RESYNCED

    # ── Internal ─────────────────────────────────────────────────────────

    def _dispatch_sentinel(self, sentinel: str, message: WireMessage) -> ReconcileOutcome:
        controller = self._controller
        if sentinel == PLAYER_JOINED:
            controller.on_opponent_join()
        elif sentinel == RESIGN:
            reporter = message.reporter
            if reporter is None:
                _LOGGER.warning("RESIGN without a valid color: %r", message.from_sq)
                return ReconcileOutcome.IGNORED
            controller.apply_terminal_signal(TerminalSignal.RESIGN, reporter)
        elif sentinel == DRAW:
            controller.apply_terminal_signal(TerminalSignal.DRAW_AGREED, message.reporter)
        return ReconcileOutcome.SIGNAL

"""Session layer — controller, reconciler, clocks, bot driver.

Quick start::

    from chesslink.core import Color, Move
    from chesslink.game import SessionController

    session = SessionController()
    session.start(Color.BLACK, room_id="r1")
    session.attempt_local_move(Move("e7", "e5"))
"""

from chesslink.game.bot import BotDriver, first_legal, random_choice
from chesslink.game.clock import ClockPair, ClockSnapshot
from chesslink.game.controller import SessionController, SessionEvents
from chesslink.game.interfaces import (
    EndReason,
    MoveSelector,
    ReconcileOutcome,
    SessionPhase,
    TerminalSignal,
)
from chesslink.game.reconciler import MoveReconciler
from chesslink.game.state import SessionState

__all__ = [
    # Enums / contracts
    "EndReason",
    "MoveSelector",
    "ReconcileOutcome",
    "SessionPhase",
    "TerminalSignal",
    # Concrete
    "BotDriver",
    "ClockPair",
    "ClockSnapshot",
    "MoveReconciler",
    "SessionController",
    "SessionEvents",
    "SessionState",
    "first_legal",
    "random_choice",
]

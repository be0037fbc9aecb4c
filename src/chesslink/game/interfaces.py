"""Shared enumerations and callable contracts for the session layer."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import IntEnum, auto
from typing import TypeAlias

from chesslink.core.move import Move

# ── Session FSM states ───────────────────────────────────────────────────────


class SessionPhase(IntEnum):
    """Finite-state-machine states for one session."""

    WAITING_FOR_OPPONENT = auto()
    ACTIVE = auto()
    PROMOTION_PENDING = auto()  # sub-state of ACTIVE
    FINISHED = auto()


class EndReason(IntEnum):
    """Why a session reached FINISHED."""

    NONE = 0
    CHECKMATE = auto()
    STALEMATE = auto()
    INSUFFICIENT_MATERIAL = auto()
    REPETITION = auto()
    FIFTY_MOVES = auto()
    RESIGN = auto()
    DRAW_AGREED = auto()
    TIMEOUT = auto()


class TerminalSignal(IntEnum):
    """Non-move protocol events that end a game."""

    RESIGN = auto()
    DRAW_AGREED = auto()


class ReconcileOutcome(IntEnum):
    """What the reconciler did with one inbound message."""

    IGNORED = auto()
    SIGNAL = auto()
    ECHO = auto()
    APPLIED = auto()
    RESYNCED = auto()
    DESYNCED = auto()


# Picks one move out of a non-empty legal-move list.
MoveSelector: TypeAlias = Callable[[Sequence[Move]], Move]

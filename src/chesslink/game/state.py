"""Session aggregate — phase, move history, clocks and terminal outcome."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesslink.core.enums import Color, GameResult
from chesslink.core.move import Move, MoveRecord
from chesslink.core.rules import STARTING_FEN, RuleOracle
from chesslink.game.clock import ClockPair
from chesslink.game.interfaces import EndReason, SessionPhase


@dataclass
class SessionState:
    """Everything one session owns.

    This is a pure data/logic class with no timers or transport.  Phase gating
    lives in :class:`~chesslink.game.controller.SessionController`.
    """

    oracle: RuleOracle = field(default_factory=RuleOracle, init=False)
    clocks: ClockPair = field(default_factory=ClockPair, init=False)
    local_color: Color = field(default=Color.WHITE, init=False)
    room_id: str | None = field(default=None, init=False)
    vs_bot: bool = field(default=False, init=False)
    phase: SessionPhase = field(default=SessionPhase.WAITING_FOR_OPPONENT, init=False)
    opponent_present: bool = field(default=False, init=False)
    pending_promotion: Move | None = field(default=None, init=False)
    result: GameResult = field(default=GameResult.IN_PROGRESS, init=False)
    end_reason: EndReason = field(default=EndReason.NONE, init=False)
    resigned_by: Color | None = field(default=None, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)
    start_fen: str = field(default=STARTING_FEN, init=False)
    desynced: bool = field(default=False, init=False)
    resync_count: int = field(default=0, init=False)

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(
        self,
        local_color: Color,
        *,
        fen: str | None = None,
        room_id: str | None = None,
        vs_bot: bool = False,
        opponent_present: bool = False,
        clocks: ClockPair | None = None,
    ) -> None:
        """Initialise (or reset) the session."""
        self.start_fen = fen or STARTING_FEN
        self.oracle = RuleOracle(self.start_fen)
        self.clocks = clocks if clocks is not None else ClockPair()
        self.local_color = local_color
        self.room_id = room_id
        self.vs_bot = vs_bot
        self.opponent_present = opponent_present
        self.phase = (
            SessionPhase.ACTIVE if opponent_present else SessionPhase.WAITING_FOR_OPPONENT
        )
        self.pending_promotion = None
        self.result = GameResult.IN_PROGRESS
        self.end_reason = EndReason.NONE
        self.resigned_by = None
        self.move_history.clear()
        self.desynced = False
        self.resync_count = 0

    # ── Position changes ─────────────────────────────────────────────────

    def commit(self, move: Move) -> MoveRecord | None:
        """Apply *move* through the oracle and append it to history.

        Returns ``None`` (nothing changed) if the oracle rejects it.
        """
        record = self.oracle.apply(move)
        if record is None:
            return None
        self.move_history.append(record)
        self.classify_terminal()
        return record

    def adopt_snapshot(self, fen: str) -> None:
        """Reload the position from *fen*; raises ``ValueError`` if invalid.

        History is left as it was: the snapshot replaces the position, not
        the plies that led to it.
        """
        self.oracle.load(fen)
        self.pending_promotion = None
        if self.phase == SessionPhase.PROMOTION_PENDING:
            self.phase = SessionPhase.ACTIVE
        self.desynced = False
        self.resync_count += 1
        self.classify_terminal()

    # ── Terminal transitions ─────────────────────────────────────────────

    def classify_terminal(self) -> bool:
        """Finish the session if the position is terminal."""
        if self.is_finished:
            return True
        oracle = self.oracle
        if oracle.is_checkmate():
            # The mated side is to move.
            self._finish(GameResult.win_for(self.side_to_move.opposite), EndReason.CHECKMATE)
        elif oracle.is_stalemate():
            self._finish(GameResult.DRAW, EndReason.STALEMATE)
        elif oracle.is_insufficient_material():
            self._finish(GameResult.DRAW, EndReason.INSUFFICIENT_MATERIAL)
        elif oracle.is_repetition():
            self._finish(GameResult.DRAW, EndReason.REPETITION)
        elif oracle.is_fifty_moves():
            self._finish(GameResult.DRAW, EndReason.FIFTY_MOVES)
        else:
            return False
        return True

    def resign(self, color: Color) -> None:
        self.resigned_by = color
        self._finish(GameResult.win_for(color.opposite), EndReason.RESIGN)

    def agree_draw(self) -> None:
        self._finish(GameResult.DRAW, EndReason.DRAW_AGREED)

    def flag_fall(self, color: Color) -> None:
        """Time ran out for *color*."""
        self._finish(GameResult.win_for(color.opposite), EndReason.TIMEOUT)

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return self.oracle.current_turn()

    @property
    def is_local_turn(self) -> bool:
        return self.side_to_move == self.local_color

    @property
    def is_finished(self) -> bool:
        return self.phase == SessionPhase.FINISHED

    @property
    def ply_count(self) -> int:
        """Number of half-moves committed."""
        return len(self.move_history)

    @property
    def last_record(self) -> MoveRecord | None:
        return self.move_history[-1] if self.move_history else None

    @property
    def fen(self) -> str:
        return self.oracle.serialize()

    @property
    def status_text(self) -> str:
        """Outcome line from the local player's point of view."""
        if not self.is_finished:
            return ""
        reason = self.end_reason
        if reason == EndReason.RESIGN:
            if self.resigned_by == self.local_color:
                return "You Resigned"
            return "You Won! (Opponent Resigned)"
        if reason == EndReason.DRAW_AGREED:
            return "Game Ended (Draw)"
        winner = self.result.winner
        if winner is None:
            return "Draw"
        name = winner.name.capitalize()
        if reason == EndReason.TIMEOUT:
            return "You Won on Time" if winner == self.local_color else "You Lost on Time"
        if winner == self.local_color:
            return f"You Won! ({name})"
        return f"You Lost ({name} Wins)"

    # ── Internal ─────────────────────────────────────────────────────────

    def _finish(self, result: GameResult, reason: EndReason) -> None:
        self.result = result
        self.end_reason = reason
        self.pending_promotion = None
        self.phase = SessionPhase.FINISHED

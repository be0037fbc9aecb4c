"""Tests for MoveReconciler (driven through SessionController)."""

from __future__ import annotations

from chesslink.core.enums import Color, GameResult, PieceKind
from chesslink.core.move import Move
from chesslink.game.controller import SessionController
from chesslink.game.interfaces import EndReason, ReconcileOutcome, SessionPhase
from chesslink.net.protocol import WireMessage

AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
AFTER_NF3 = "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"


def _session(color: Color) -> SessionController:
    ctrl = SessionController()
    ctrl.start(color, room_id="r")
    ctrl.on_opponent_join()
    return ctrl


def _move(from_sq: str, to_sq: str, **kwargs) -> WireMessage:
    return WireMessage(room_id="r", from_sq=from_sq, to_sq=to_sq, **kwargs)


class TestRemoteMoves:
    def test_applies_opponent_move(self) -> None:
        ctrl = _session(Color.BLACK)
        outcome = ctrl.apply_remote_message(_move("e2", "e4", fen=AFTER_E4))
        assert outcome == ReconcileOutcome.APPLIED
        assert ctrl.state.fen == AFTER_E4
        assert ctrl.state.is_local_turn

    def test_echo_of_own_move_suppressed(self) -> None:
        ctrl = _session(Color.WHITE)
        ctrl.attempt_local_move(Move("e2", "e4"))
        outcome = ctrl.apply_remote_message(_move("e2", "e4", fen=AFTER_E4))
        assert outcome == ReconcileOutcome.ECHO
        assert ctrl.state.ply_count == 1

    def test_duplicate_delivery_is_idempotent(self) -> None:
        ctrl = _session(Color.BLACK)
        ctrl.apply_remote_message(_move("e2", "e4"))
        assert ctrl.apply_remote_message(_move("e2", "e4")) == ReconcileOutcome.ECHO
        assert ctrl.state.ply_count == 1

    def test_default_promotion_for_remote_pawn(self) -> None:
        ctrl = SessionController()
        ctrl.start(Color.BLACK, fen="k7/4P3/8/8/8/8/8/7K w - - 0 1")
        outcome = ctrl.apply_remote_message(_move("e7", "e8"))
        assert outcome == ReconcileOutcome.APPLIED
        assert ctrl.state.last_record.promotion == PieceKind.QUEEN

    def test_explicit_remote_promotion_kept(self) -> None:
        ctrl = SessionController()
        ctrl.start(Color.BLACK, fen="k7/4P3/8/8/8/8/8/7K w - - 0 1")
        ctrl.apply_remote_message(_move("e7", "e8", promotion=PieceKind.KNIGHT))
        assert ctrl.state.last_record.promotion == PieceKind.KNIGHT

    def test_incomplete_move_ignored(self) -> None:
        ctrl = _session(Color.BLACK)
        outcome = ctrl.apply_remote_message(WireMessage(room_id="r", from_sq="e2"))
        assert outcome == ReconcileOutcome.IGNORED
        assert ctrl.state.ply_count == 0


class TestResync:
    def test_rejected_move_adopts_snapshot(self) -> None:
        ctrl = _session(Color.BLACK)
        adopted: list[str] = []
        ctrl.events.on_resync.append(adopted.append)
        # Black missed 1.e4 e5 and sees 2.Nf3 out of context.
        outcome = ctrl.apply_remote_message(_move("g1", "e5", fen=AFTER_NF3))
        assert outcome == ReconcileOutcome.RESYNCED
        assert ctrl.state.fen == AFTER_NF3
        assert adopted == [AFTER_NF3]
        assert ctrl.state.resync_count == 1

    def test_rejected_move_without_snapshot_desyncs(self) -> None:
        ctrl = _session(Color.BLACK)
        flagged: list[WireMessage] = []
        ctrl.events.on_desync.append(flagged.append)
        message = _move("e2", "e5")
        assert ctrl.apply_remote_message(message) == ReconcileOutcome.DESYNCED
        assert ctrl.state.desynced
        assert flagged == [message]

    def test_invalid_snapshot_desyncs(self) -> None:
        ctrl = _session(Color.BLACK)
        outcome = ctrl.apply_remote_message(_move("e2", "e5", fen="not a fen"))
        assert outcome == ReconcileOutcome.DESYNCED
        assert ctrl.state.ply_count == 0

    def test_resync_clears_pending_promotion(self) -> None:
        ctrl = SessionController()
        ctrl.start(Color.WHITE, fen="8/4P3/8/8/8/8/k7/7K w - - 0 1", white_time=500)
        ctrl.attempt_local_move(Move("e7", "e8"))
        assert ctrl.state.phase == SessionPhase.PROMOTION_PENDING
        ctrl.apply_remote_message(_move("a2", "a1", fen="4Q3/8/8/8/8/8/k7/7K b - - 0 1"))
        assert ctrl.state.phase == SessionPhase.ACTIVE
        assert ctrl.state.pending_promotion is None


class TestRemoteClocks:
    def test_reported_times_overwrite(self) -> None:
        ctrl = _session(Color.BLACK)
        ticks: list[tuple[int, int]] = []
        ctrl.events.on_clock.append(lambda w, b: ticks.append((w, b)))
        ctrl.apply_remote_message(_move("e2", "e4", white_time=550, black_time=600))
        assert ctrl.state.clocks.remaining(Color.WHITE) == 550
        assert ticks[-1] == (550, 600)

    def test_zero_time_means_unreported(self) -> None:
        ctrl = _session(Color.BLACK)
        ctrl.apply_remote_message(_move("e2", "e4", white_time=0, black_time=0))
        assert ctrl.state.clocks.remaining(Color.WHITE) == 600
        assert ctrl.state.clocks.remaining(Color.BLACK) == 600


class TestSignals:
    def test_player_joined(self) -> None:
        ctrl = SessionController()
        ctrl.start(Color.WHITE, room_id="r")
        outcome = ctrl.apply_remote_message(WireMessage(room_id="r", fen="PLAYER_JOINED"))
        assert outcome == ReconcileOutcome.SIGNAL
        assert ctrl.state.phase == SessionPhase.ACTIVE

    def test_white_resign_seen_by_black(self) -> None:
        ctrl = _session(Color.BLACK)
        ctrl.apply_remote_message(WireMessage(room_id="r", from_sq="white", fen="RESIGN"))
        assert ctrl.state.end_reason == EndReason.RESIGN
        assert ctrl.state.result == GameResult.BLACK_WINS
        assert ctrl.state.status_text == "You Won! (Opponent Resigned)"

    def test_own_resign_echo_keeps_outcome(self) -> None:
        ctrl = _session(Color.WHITE)
        ctrl.resign()
        ctrl.apply_remote_message(WireMessage(room_id="r", from_sq="white", fen="RESIGN"))
        assert ctrl.state.result == GameResult.BLACK_WINS
        assert ctrl.state.status_text == "You Resigned"

    def test_resign_without_color_ignored(self) -> None:
        ctrl = _session(Color.BLACK)
        outcome = ctrl.apply_remote_message(WireMessage(room_id="r", fen="RESIGN"))
        assert outcome == ReconcileOutcome.IGNORED
        assert not ctrl.state.is_finished

    def test_draw(self) -> None:
        ctrl = _session(Color.WHITE)
        ctrl.apply_remote_message(WireMessage(room_id="r", from_sq="black", fen="DRAW"))
        assert ctrl.state.result == GameResult.DRAW
        assert ctrl.state.status_text == "Game Ended (Draw)"

    def test_moves_after_finish_ignored(self) -> None:
        ctrl = _session(Color.BLACK)
        ctrl.apply_remote_message(WireMessage(room_id="r", from_sq="white", fen="DRAW"))
        assert ctrl.apply_remote_message(_move("e2", "e4")) == ReconcileOutcome.IGNORED
        assert ctrl.state.ply_count == 0

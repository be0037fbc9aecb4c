"""Tests for BotDriver and bot sessions."""

from __future__ import annotations

from PyQt6.QtTest import QTest

from chesslink.config import SessionSettings
from chesslink.core.enums import Color
from chesslink.core.move import Move
from chesslink.game.bot import first_legal, random_choice
from chesslink.game.interfaces import SessionPhase
from chesslink.net.bootstrap import open_bot_session


class TestSelectors:
    def test_first_legal(self) -> None:
        moves = [Move("e2", "e4"), Move("d2", "d4")]
        assert first_legal(moves) == Move("e2", "e4")

    def test_random_choice_picks_from_list(self) -> None:
        moves = [Move("e2", "e4"), Move("d2", "d4")]
        assert random_choice(moves) in moves


class TestBotGating:
    def test_nothing_before_start_bot(self) -> None:
        ctrl = open_bot_session(Color.WHITE, selector=first_legal)
        assert ctrl.state.phase == SessionPhase.ACTIVE
        assert ctrl.attempt_local_move(Move("e2", "e4")) is None
        ctrl.tick()
        assert ctrl.state.clocks.remaining(Color.WHITE) == 600
        ctrl.leave()

    def test_start_bot_only_once(self) -> None:
        ctrl = open_bot_session(Color.WHITE)
        assert ctrl.start_bot()
        assert not ctrl.start_bot()
        ctrl.leave()

    def test_bot_waits_for_its_turn(self) -> None:
        ctrl = open_bot_session(Color.WHITE, selector=first_legal)
        ctrl.start_bot()
        assert not ctrl.bot.is_pending
        ctrl.attempt_local_move(Move("e2", "e4"))
        assert ctrl.bot.is_pending
        ctrl.leave()

    def test_bot_moves_first_for_black_player(self) -> None:
        ctrl = open_bot_session(Color.BLACK, selector=first_legal)
        ctrl.start_bot()
        assert ctrl.bot.is_pending
        ctrl.bot._on_think_elapsed()
        assert ctrl.state.ply_count == 1
        assert ctrl.state.is_local_turn
        assert not ctrl.bot.is_pending
        ctrl.leave()

    def test_bot_never_moves_local_side(self) -> None:
        ctrl = open_bot_session(Color.WHITE, selector=first_legal)
        ctrl.start_bot()
        ctrl.bot._on_think_elapsed()
        assert ctrl.state.ply_count == 0
        assert ctrl.submit_bot_move(Move("e2", "e4")) is None
        ctrl.leave()

    def test_bot_stops_when_finished(self) -> None:
        ctrl = open_bot_session(Color.BLACK, selector=first_legal)
        ctrl.start_bot()
        ctrl.resign()
        assert not ctrl.bot.is_pending
        ctrl.bot._on_think_elapsed()
        assert ctrl.state.ply_count == 0

    def test_leave_cancels_pending_move(self) -> None:
        ctrl = open_bot_session(Color.BLACK)
        ctrl.start_bot()
        ctrl.leave()
        assert not ctrl.bot.is_pending
        ctrl.bot._on_think_elapsed()
        assert ctrl.state.ply_count == 0


class TestBotTimer:
    def test_bot_replies_after_delay(self) -> None:
        settings = SessionSettings(think_delay_ms=10)
        ctrl = open_bot_session(Color.WHITE, settings=settings, selector=first_legal)
        ctrl.start_bot()
        ctrl.attempt_local_move(Move("e2", "e4"))
        QTest.qWait(200)
        assert ctrl.state.ply_count == 2
        assert ctrl.state.is_local_turn
        ctrl.leave()

    def test_alternating_play(self) -> None:
        ctrl = open_bot_session(Color.WHITE, selector=first_legal)
        ctrl.start_bot()
        for _ in range(10):
            if ctrl.state.is_finished:
                break
            legal = ctrl.state.oracle.legal_moves()
            ctrl.attempt_local_move(first_legal(legal))
            if ctrl.state.is_finished:
                break
            ctrl.bot._on_think_elapsed()
        assert ctrl.state.ply_count >= 2
        # Bot games never publish and have no transport.
        assert ctrl.channel is None
        assert not ctrl.connected
        ctrl.leave()

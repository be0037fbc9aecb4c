"""SessionController — the central orchestrator of one session.

Coordinates: SessionState, RuleOracle, ClockPair, MoveReconciler, BotDriver
and the RoomChannel.  Emits events via simple callbacks so a UI or tests
can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from PyQt6.QtCore import QObject, QTimer

from chesslink.config import SessionSettings
from chesslink.core.enums import PROMOTION_KINDS, Color, GameResult, PieceKind
from chesslink.core.move import Move, MoveRecord
from chesslink.game.bot import BotDriver, random_choice
from chesslink.game.clock import ClockPair
from chesslink.game.interfaces import (
    EndReason,
    MoveSelector,
    ReconcileOutcome,
    SessionPhase,
    TerminalSignal,
)
from chesslink.game.reconciler import MoveReconciler
from chesslink.game.state import SessionState
from chesslink.net.channel import RoomChannel
from chesslink.net.protocol import DRAW, RESIGN, WireMessage

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, SessionState], None]
GameOverCallback = Callable[[GameResult, EndReason], None]
PhaseCallback = Callable[[SessionPhase], None]
PromotionCallback = Callable[[Move], None]
ClockCallback = Callable[[int, int], None]  # white, black
TimeoutCallback = Callable[[Color], None]
DesyncCallback = Callable[[WireMessage], None]
ResyncCallback = Callable[[str], None]  # adopted fen
ConnectionCallback = Callable[[bool], None]


@dataclass
class SessionEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_promotion_required: list[PromotionCallback] = field(default_factory=list)
    on_clock: list[ClockCallback] = field(default_factory=list)
    on_timeout: list[TimeoutCallback] = field(default_factory=list)
    on_desync: list[DesyncCallback] = field(default_factory=list)
    on_resync: list[ResyncCallback] = field(default_factory=list)
    on_connection_changed: list[ConnectionCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class SessionController:
    """Gates every mutation on phase and turn, and keeps peers in sync.

    Thread-safety: all methods run on the thread owning the Qt event loop.
    Inbound messages, clock ticks and bot moves are delivered there as
    queued events, so no two mutations interleave.
    """

    __slots__ = (
        "__weakref__",
        "_settings",
        "_state",
        "_channel",
        "_reconciler",
        "_selector",
        "_parent",
        "_bot",
        "_bot_started",
        "_clock_timer",
        "_closed",
        "events",
    )

    def __init__(
        self,
        settings: SessionSettings | None = None,
        *,
        channel: RoomChannel | None = None,
        selector: MoveSelector | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._settings = settings or SessionSettings()
        self._state = SessionState()
        self._channel = channel
        self._reconciler = MoveReconciler(
            self,
            default_promotion=PieceKind.from_char(self._settings.remote_default_promotion),
        )
        self._selector = selector or random_choice
        self._parent = parent
        self._bot: BotDriver | None = None
        self._bot_started = False
        self._closed = False

        self._clock_timer = QTimer(parent)
        self._clock_timer.setInterval(self._settings.clock_tick_ms)
        self._clock_timer.timeout.connect(self.tick)
        if channel is not None:
            channel.add_connection_listener(self._on_connection_changed)

        self.events = SessionEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def settings(self) -> SessionSettings:
        return self._settings

    @property
    def channel(self) -> RoomChannel | None:
        return self._channel

    @property
    def bot(self) -> BotDriver | None:
        return self._bot

    @property
    def bot_started(self) -> bool:
        return self._bot_started

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def connected(self) -> bool:
        """Transport status; bot games have no transport and report False."""
        return self._channel is not None and self._channel.connected

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(
        self,
        local_color: Color,
        *,
        room_id: str | None = None,
        fen: str | None = None,
        white_time: int | None = None,
        black_time: int | None = None,
        vs_bot: bool = False,
    ) -> None:
        """Set up the session and begin listening / ticking.

        The room creator (White) cannot know the opponent is there until a
        join signal arrives.  Black, a bot opponent, or clocks that already
        moved all imply the opponent is present.
        """
        initial = self._settings.initial_clock_seconds
        white = initial if white_time is None else white_time
        black = initial if black_time is None else black_time
        progressed = white < initial or black < initial
        present = vs_bot or local_color == Color.BLACK or progressed

        clocks = ClockPair(white, black)
        clocks.on_timeout.append(self._on_clock_timeout)
        self._state.setup(
            local_color,
            fen=fen,
            room_id=room_id,
            vs_bot=vs_bot,
            opponent_present=present,
            clocks=clocks,
        )
        self._bot_started = False
        self._closed = False

        if vs_bot:
            self._bot = BotDriver(
                self,
                think_delay_ms=self._settings.think_delay_ms,
                select=self._selector,
                parent=self._parent,
            )
        elif self._channel is not None:
            self._channel.open(self._on_channel_message)

        _LOGGER.info(
            "Session started: room=%s color=%s bot=%s phase=%s",
            room_id,
            local_color,
            vs_bot,
            self._state.phase.name,
        )
        self._emit_phase(self._state.phase)
        self._emit_clock()

        if self._state.classify_terminal():
            self._on_finished()
            return
        self._clock_timer.start()

    def start_bot(self) -> bool:
        """Begin the bot phase of a bot game (explicit player action)."""
        if not self._state.vs_bot or self._bot_started:
            return False
        if self._closed or self._state.is_finished:
            return False
        self._bot_started = True
        self._after_position_change()
        return True

    def leave(self) -> None:
        """Tear down: stop timers, cancel the bot, drop the subscription."""
        if self._closed:
            return
        self._closed = True
        self._clock_timer.stop()
        if self._bot is not None:
            self._bot.cancel()
        if self._channel is not None:
            self._channel.close()
        _LOGGER.info("Left session room=%s", self._state.room_id)

    # ── Opponent presence ────────────────────────────────────────────────

    def on_opponent_join(self) -> bool:
        """WAITING_FOR_OPPONENT → ACTIVE; repeated signals are no-ops."""
        if self._closed or self._state.phase != SessionPhase.WAITING_FOR_OPPONENT:
            return False
        self._state.opponent_present = True
        self._state.phase = SessionPhase.ACTIVE
        self._emit_phase(SessionPhase.ACTIVE)
        return True

    # ── Local intents ────────────────────────────────────────────────────

    def attempt_local_move(self, move: Move) -> MoveRecord | None:
        """Try a move for the local side.

        Returns the committed record, or ``None`` when the move was rejected
        or is waiting for a promotion choice (see :meth:`resolve_promotion`).
        """
        if not self._can_move_locally():
            return None
        oracle = self._state.oracle
        if move.promotion is None and oracle.is_promotion_move(move):
            if not oracle.is_legal(move.with_promotion(PieceKind.QUEEN)):
                return None
            self._state.pending_promotion = move
            self._state.phase = SessionPhase.PROMOTION_PENDING
            self._emit_phase(SessionPhase.PROMOTION_PENDING)
            for cb in self.events.on_promotion_required:
                cb(move)
            return None
        return self._commit(move, publish=True)

    def resolve_promotion(self, kind: PieceKind) -> MoveRecord | None:
        """Complete the pending promotion with *kind* (queen/rook/bishop/knight)."""
        state = self._state
        pending = state.pending_promotion
        if self._closed or state.phase != SessionPhase.PROMOTION_PENDING or pending is None:
            return None
        if kind not in PROMOTION_KINDS:
            return None
        state.pending_promotion = None
        state.phase = SessionPhase.ACTIVE
        self._emit_phase(SessionPhase.ACTIVE)
        return self._commit(pending.with_promotion(kind), publish=True)

    def cancel_promotion(self) -> bool:
        """Abandon the pending promotion; no move is applied."""
        if self._state.phase != SessionPhase.PROMOTION_PENDING:
            return False
        self._state.pending_promotion = None
        self._state.phase = SessionPhase.ACTIVE
        self._emit_phase(SessionPhase.ACTIVE)
        return True

    def resign(self) -> bool:
        """Local player resigns; the opponent is told via the channel."""
        local = self._state.local_color
        if not self.apply_terminal_signal(TerminalSignal.RESIGN, local):
            return False
        self._publish_signal(RESIGN, local)
        return True

    def offer_draw(self) -> bool:
        """End the game as a draw on both sides."""
        local = self._state.local_color
        if not self.apply_terminal_signal(TerminalSignal.DRAW_AGREED, local):
            return False
        self._publish_signal(DRAW, local)
        return True

    # ── Remote / terminal events ─────────────────────────────────────────

    def apply_remote_message(self, message: WireMessage) -> ReconcileOutcome:
        """Fold one inbound room message into the session."""
        if self._closed:
            return ReconcileOutcome.IGNORED
        return self._reconciler.handle(message)

    def apply_terminal_signal(self, kind: TerminalSignal, reported_by: Color | None) -> bool:
        """Finish immediately on RESIGN / DRAW_AGREED."""
        if self._closed or self._state.is_finished:
            return False
        if kind == TerminalSignal.RESIGN:
            if reported_by is None:
                return False
            self._state.resign(reported_by)
        else:
            self._state.agree_draw()
        self._on_finished()
        return True

    # ── Hooks used by the reconciler ─────────────────────────────────────

    def commit_remote_move(self, move: Move) -> MoveRecord | None:
        """Apply an opponent move; turn gating is the oracle's job here."""
        if self._closed or self._state.is_finished:
            return None
        return self._commit(move, publish=False)

    def adopt_snapshot(self, fen: str) -> bool:
        """Replace the local position with the authority's FEN."""
        try:
            self._state.adopt_snapshot(fen)
        except ValueError as exc:
            _LOGGER.warning("Rejected snapshot %r: %s", fen, exc)
            return False
        _LOGGER.info("Resynchronised from snapshot %s", fen)
        for cb in self.events.on_resync:
            cb(fen)
        if self._state.is_finished:
            self._on_finished()
        else:
            self._emit_phase(self._state.phase)
            self._after_position_change()
        return True

    def mark_desynced(self, message: WireMessage) -> None:
        self._state.desynced = True
        for cb in self.events.on_desync:
            cb(message)

    def overwrite_clocks(self, white: int | None, black: int | None) -> None:
        """Remote clock values replace the local countdown outright."""
        self._state.clocks.overwrite(white, black)
        self._emit_clock()

    # ── Bot ──────────────────────────────────────────────────────────────

    def submit_bot_move(self, move: Move) -> MoveRecord | None:
        """Commit a move on behalf of the bot (never the local side)."""
        state = self._state
        if self._closed or not state.vs_bot or not self._bot_started:
            return None
        if state.phase != SessionPhase.ACTIVE or state.is_local_turn:
            return None
        return self._commit(move, publish=True)

    # ── Clock ────────────────────────────────────────────────────────────

    def tick(self) -> None:
        """Advance the side-to-move's clock by one second, when allowed."""
        color = self.ticking_color
        if color is None:
            return
        self._state.clocks.tick(color)
        self._emit_clock()

    @property
    def ticking_color(self) -> Color | None:
        """Side whose clock runs right now, or ``None`` when both are frozen."""
        state = self._state
        if self._closed or not state.opponent_present:
            return None
        if state.phase not in (SessionPhase.ACTIVE, SessionPhase.PROMOTION_PENDING):
            return None
        if state.vs_bot and not self._bot_started:
            return None
        return state.side_to_move

    # ── Internal helpers ─────────────────────────────────────────────────

    def _can_move_locally(self) -> bool:
        state = self._state
        if self._closed or state.phase != SessionPhase.ACTIVE:
            return False
        if state.vs_bot and not self._bot_started:
            return False
        return state.is_local_turn

    def _commit(self, move: Move, *, publish: bool) -> MoveRecord | None:
        record = self._state.commit(move)
        if record is None:
            return None
        for cb in self.events.on_move:
            cb(record, self._state)
        if publish:
            self._publish_move(record)
        if self._state.is_finished:
            self._on_finished()
        else:
            self._after_position_change()
        return record

    def _after_position_change(self) -> None:
        if self._bot is not None:
            self._bot.on_position_changed()

    def _on_finished(self) -> None:
        self._clock_timer.stop()
        if self._bot is not None:
            self._bot.cancel()
        state = self._state
        _LOGGER.info(
            "Game over: %s (%s)", state.result.name, state.end_reason.name
        )
        self._emit_phase(SessionPhase.FINISHED)
        for cb in self.events.on_game_over:
            cb(state.result, state.end_reason)

    def _on_clock_timeout(self, color: Color) -> None:
        for cb in self.events.on_timeout:
            cb(color)
        if self._settings.timeout_ends_game and not self._state.is_finished:
            self._state.flag_fall(color)
            self._on_finished()

    def _on_channel_message(self, message: WireMessage) -> None:
        self.apply_remote_message(message)

    def _on_connection_changed(self, connected: bool) -> None:
        if self._closed:
            return
        if connected:
            _LOGGER.info("Room %s connected", self._state.room_id)
        else:
            _LOGGER.warning("Room %s disconnected", self._state.room_id)
        for cb in self.events.on_connection_changed:
            cb(connected)

    def _publish_move(self, record: MoveRecord) -> None:
        if self._channel is None or self._state.vs_bot:
            return
        self._channel.send_move(record, self._state.fen)

    def _publish_signal(self, sentinel: str, color: Color) -> None:
        if self._channel is None or self._state.vs_bot:
            return
        self._channel.send_signal(sentinel, color)

    def _emit_phase(self, phase: SessionPhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_clock(self) -> None:
        snap = self._state.clocks.snapshot()
        for cb in self.events.on_clock:
            cb(snap.white_remaining, snap.black_remaining)

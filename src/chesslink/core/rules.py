"""RuleOracle — the legality and game-end authority for one session.

Wraps a python-chess :class:`chess.Board`.  The oracle is the only owner of
the position; callers mutate it exclusively through :meth:`RuleOracle.apply`
and :meth:`RuleOracle.load`.
"""

from __future__ import annotations

import time

import chess

from chesslink.core.enums import Color, PieceKind
from chesslink.core.move import Move, MoveRecord
from chesslink.core.piece import Piece
from chesslink.core.types import Square, parse_square, rank_of

STARTING_FEN = chess.STARTING_FEN


def _to_color(turn: chess.Color) -> Color:
    return Color.WHITE if turn == chess.WHITE else Color.BLACK


class RuleOracle:
    """Legality checks, move application and terminal-state queries."""

    __slots__ = ("_board",)

    def __init__(self, fen: str | None = None) -> None:
        self._board = chess.Board(fen) if fen else chess.Board()

    # ── Turn / moves ─────────────────────────────────────────────────────

    def current_turn(self) -> Color:
        return _to_color(self._board.turn)

    def legal_moves(self, square: Square | None = None) -> list[Move]:
        """Legal moves for the side to move, optionally from *square* only."""
        origin = chess.parse_square(parse_square(square)) if square else None
        moves: list[Move] = []
        for cm in self._board.legal_moves:
            if origin is not None and cm.from_square != origin:
                continue
            moves.append(self._from_chess(cm))
        return moves

    def is_legal(self, move: Move) -> bool:
        return self._to_chess(move) in self._board.legal_moves

    def is_promotion_move(self, move: Move) -> bool:
        """A pawn of the side to move heading for its last rank."""
        piece = self.piece_at(move.from_sq)
        if piece is None or piece.kind != PieceKind.PAWN:
            return False
        if piece.color != self.current_turn():
            return False
        last_rank = 7 if piece.color == Color.WHITE else 0
        return rank_of(move.to_sq) == last_rank

    def apply(self, move: Move) -> MoveRecord | None:
        """Apply *move* if legal; return its record, or ``None`` if rejected."""
        cm = self._to_chess(move)
        if cm not in self._board.legal_moves:
            return None
        san = self._board.san(cm)
        self._board.push(cm)
        return MoveRecord(
            from_sq=move.from_sq,
            to_sq=move.to_sq,
            promotion=PieceKind(cm.promotion) if cm.promotion else None,
            san=san,
            timestamp=time.time(),
        )

    # ── Queries ──────────────────────────────────────────────────────────

    def piece_at(self, square: Square) -> Piece | None:
        piece = self._board.piece_at(chess.parse_square(parse_square(square)))
        if piece is None:
            return None
        return Piece(_to_color(piece.color), PieceKind(piece.piece_type))

    def is_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self._board.is_stalemate()

    def is_insufficient_material(self) -> bool:
        return self._board.is_insufficient_material()

    def is_repetition(self) -> bool:
        """Threefold repetition of the current position."""
        return self._board.is_repetition(3)

    def is_fifty_moves(self) -> bool:
        return self._board.is_fifty_moves()

    def is_draw(self) -> bool:
        return (
            self.is_stalemate()
            or self.is_insufficient_material()
            or self.is_repetition()
            or self.is_fifty_moves()
        )

    def is_game_over(self) -> bool:
        return self.is_checkmate() or self.is_draw()

    # ── Full-state transfer ──────────────────────────────────────────────

    def serialize(self) -> str:
        return self._board.fen()

    def load(self, fen: str) -> None:
        """Replace the position with *fen*; raises ``ValueError`` if invalid.

        The current position is kept when *fen* cannot be parsed.
        """
        self._board = chess.Board(fen)

    # ── Internal ─────────────────────────────────────────────────────────

    def _to_chess(self, move: Move) -> chess.Move:
        # A promotion piece on a non-promotion move is ignored.
        promotion = None
        if move.promotion is not None and self.is_promotion_move(move):
            promotion = int(move.promotion)
        return chess.Move(
            chess.parse_square(move.from_sq),
            chess.parse_square(move.to_sq),
            promotion=promotion,
        )

    @staticmethod
    def _from_chess(cm: chess.Move) -> Move:
        return Move(
            chess.square_name(cm.from_square),
            chess.square_name(cm.to_square),
            PieceKind(cm.promotion) if cm.promotion else None,
        )

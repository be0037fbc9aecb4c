"""Core value types and the rule oracle.

Quick start::

    from chesslink.core import Move, RuleOracle

    oracle = RuleOracle()
    record = oracle.apply(Move("e2", "e4"))
    print(record.san, oracle.serialize())
"""

from chesslink.core.enums import PROMOTION_KINDS, Color, GameResult, PieceKind
from chesslink.core.move import Move, MoveRecord
from chesslink.core.piece import Piece
from chesslink.core.rules import STARTING_FEN, RuleOracle
from chesslink.core.types import Square, parse_square, rank_of

__all__ = [
    # Enums
    "Color",
    "GameResult",
    "PieceKind",
    "PROMOTION_KINDS",
    # Types / helpers
    "Square",
    "parse_square",
    "rank_of",
    # Domain objects
    "Move",
    "MoveRecord",
    "Piece",
    "RuleOracle",
    "STARTING_FEN",
]

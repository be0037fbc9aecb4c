"""Tests for Move, enums and square helpers."""

import pytest

from chesslink.core.enums import Color, GameResult, PieceKind
from chesslink.core.move import Move
from chesslink.core.types import parse_square, rank_of


class TestMove:
    def test_normalises_squares(self) -> None:
        move = Move("E2", "e4")
        assert move.from_sq == "e2"
        assert move.uci == "e2e4"

    def test_invalid_square(self) -> None:
        with pytest.raises(ValueError):
            Move("z9", "e4")

    def test_from_uci_with_promotion(self) -> None:
        move = Move.from_uci("a7a8n")
        assert move.promotion == PieceKind.KNIGHT
        assert str(move) == "a7a8n"

    def test_from_uci_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            Move.from_uci("e2")

    def test_is_immutable(self) -> None:
        move = Move("e2", "e4")
        with pytest.raises(AttributeError):
            move.to_sq = "e5"  # type: ignore[misc]

    def test_same_squares_ignores_promotion(self) -> None:
        move = Move("a7", "a8", PieceKind.QUEEN)
        assert move.same_squares("a7", "a8")
        assert not move.same_squares("a7", "b8")


class TestEnums:
    @pytest.mark.parametrize("text", ["white", "W", " White "])
    def test_parse_white(self, text: str) -> None:
        assert Color.parse(text) == Color.WHITE

    def test_parse_rejects_spectator(self) -> None:
        with pytest.raises(ValueError):
            Color.parse("spectator")

    def test_opposite(self) -> None:
        assert Color.WHITE.opposite == Color.BLACK

    def test_piece_kind_chars(self) -> None:
        assert PieceKind.from_char("Q") == PieceKind.QUEEN
        with pytest.raises(ValueError):
            PieceKind.from_char("x")

    def test_result_winner(self) -> None:
        assert GameResult.win_for(Color.BLACK).winner == Color.BLACK
        assert GameResult.DRAW.winner is None


class TestSquares:
    def test_rank_of(self) -> None:
        assert rank_of(parse_square("h8")) == 7

    def test_parse_rejects_non_string(self) -> None:
        with pytest.raises(ValueError):
            parse_square(None)  # type: ignore[arg-type]


class TestPackageExports:
    def test_every_exported_name_resolves(self) -> None:
        import chesslink.core as core

        for name in core.__all__:
            assert hasattr(core, name), name

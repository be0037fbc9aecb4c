"""Core enumerations for the chess domain."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    @property
    def wire_name(self) -> str:
        """Name used on the wire and in bootstrap payloads."""
        return self.name.lower()

    @classmethod
    def parse(cls, text: str) -> Color:
        """Parse ``'white'``/``'w'``/``'black'``/``'b'`` (case-insensitive)."""
        value = text.strip().lower() if isinstance(text, str) else ""
        if value in ("white", "w"):
            return cls.WHITE
        if value in ("black", "b"):
            return cls.BLACK
        raise ValueError(f"Invalid color: {text!r}")

    def __str__(self) -> str:
        return self.name.lower()


class PieceKind(IntEnum):
    """Piece kinds; values match python-chess piece types."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def char(self) -> str:
        return _KIND_CHARS[self]

    @classmethod
    def from_char(cls, ch: str) -> PieceKind:
        try:
            return _CHAR_KINDS[ch.lower()]
        except (KeyError, AttributeError):
            raise ValueError(f"Invalid piece kind: {ch!r}") from None


_KIND_CHARS: dict[PieceKind, str] = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
_CHAR_KINDS = {ch: kind for kind, ch in _KIND_CHARS.items()}

PROMOTION_KINDS: tuple[PieceKind, ...] = (
    PieceKind.QUEEN,
    PieceKind.ROOK,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
)


class GameResult(IntEnum):
    """Outcome of a game."""

    IN_PROGRESS = 0
    WHITE_WINS = 1
    BLACK_WINS = 2
    DRAW = 3

    @classmethod
    def win_for(cls, color: Color) -> GameResult:
        return cls.WHITE_WINS if color == Color.WHITE else cls.BLACK_WINS

    @property
    def winner(self) -> Color | None:
        if self == GameResult.WHITE_WINS:
            return Color.WHITE
        if self == GameResult.BLACK_WINS:
            return Color.BLACK
        return None

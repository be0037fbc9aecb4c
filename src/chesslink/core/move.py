"""Move value object and committed-move record."""

from __future__ import annotations

from dataclasses import dataclass, replace

from chesslink.core.enums import PieceKind
from chesslink.core.types import Square, parse_square


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move."""

    from_sq: Square
    to_sq: Square
    promotion: PieceKind | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_sq", parse_square(self.from_sq))
        object.__setattr__(self, "to_sq", parse_square(self.to_sq))

    def __str__(self) -> str:
        base = f"{self.from_sq}{self.to_sq}"
        if self.promotion is not None:
            base += self.promotion.char
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)

    @classmethod
    def from_uci(cls, text: str) -> Move:
        if len(text) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {text!r}")
        promotion = PieceKind.from_char(text[4]) if len(text) == 5 else None
        return cls(text[:2], text[2:4], promotion)

    def with_promotion(self, kind: PieceKind | None) -> Move:
        return replace(self, promotion=kind)

    def same_squares(self, from_sq: Square | None, to_sq: Square | None) -> bool:
        """True when *from_sq*/*to_sq* name the same origin and target."""
        return self.from_sq == from_sq and self.to_sq == to_sq


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single committed entry in the move history."""

    from_sq: Square
    to_sq: Square
    promotion: PieceKind | None
    san: str
    timestamp: float

    @property
    def move(self) -> Move:
        return Move(self.from_sq, self.to_sq, self.promotion)

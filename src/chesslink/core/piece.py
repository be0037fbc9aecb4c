"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chesslink.core.enums import Color, PieceKind


@dataclass(frozen=True, slots=True)
class Piece:
    """A colored piece standing on a square."""

    color: Color
    kind: PieceKind

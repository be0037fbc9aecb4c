"""Square type alias and coordinate helpers.

Squares travel as lowercase algebraic names (``"e4"``) everywhere: on the
wire, in move records and in the oracle API.
"""

from __future__ import annotations

from typing import TypeAlias

Square: TypeAlias = str  # "a1".."h8"

_FILES = "abcdefgh"
_RANKS = "12345678"


def parse_square(name: str) -> Square:
    """Validate and normalise a square name, e.g. ``'E4'`` → ``'e4'``."""
    if not isinstance(name, str):
        raise ValueError(f"Invalid square name: {name!r}")
    sq = name.strip().lower()
    if len(sq) != 2 or sq[0] not in _FILES or sq[1] not in _RANKS:
        raise ValueError(f"Invalid square name: {name!r}")
    return sq


def rank_of(sq: Square) -> int:
    """Rank index 0–7 (1–8)."""
    return _RANKS.index(sq[1])

"""Wire schema for room messages.

One JSON object per message::

    {"roomId": "...", "from": "e2", "to": "e4", "promotion": "q",
     "fen": "...", "whiteTime": 590, "blackTime": 600}

Three sentinel values occupy ``fen`` in place of a position string:
``PLAYER_JOINED``, ``RESIGN`` and ``DRAW``.  For ``RESIGN`` (and ``DRAW``)
the ``from`` field carries the reporting side's color instead of a square.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
)

from chesslink.core.enums import Color, PieceKind
from chesslink.core.move import Move, MoveRecord
from chesslink.core.types import parse_square

PLAYER_JOINED = "PLAYER_JOINED"
RESIGN = "RESIGN"
DRAW = "DRAW"
SENTINELS = frozenset({PLAYER_JOINED, RESIGN, DRAW})

# Whole seconds; the server sends longs, so floats and booleans are rejected.
Seconds = Annotated[int, Field(strict=True, ge=0)]


class WireMessage(BaseModel):
    """Decoded room message.  All fields are optional on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    # Declared first: square validation depends on it.
    fen: str | None = None
    room_id: str | None = Field(default=None, alias="roomId")
    from_sq: str | None = Field(default=None, alias="from")
    to_sq: str | None = Field(default=None, alias="to")
    promotion: PieceKind | None = None
    white_time: Seconds | None = Field(default=None, alias="whiteTime")
    black_time: Seconds | None = Field(default=None, alias="blackTime")

    @field_validator("from_sq", "to_sq")
    @classmethod
    def _validate_square(cls, value: str | None, info: ValidationInfo) -> str | None:
        if not value:
            return None
        # Sentinels reuse ``from`` for a color name.
        if info.data.get("fen") in SENTINELS:
            return value
        return parse_square(value)

    @field_validator("promotion", mode="plain")
    @classmethod
    def _validate_promotion(cls, value: Any) -> PieceKind | None:
        if value is None or value == "":
            return None
        if isinstance(value, PieceKind):
            return value
        return PieceKind.from_char(value)

    @field_serializer("promotion")
    def _serialize_promotion(self, value: PieceKind | None) -> str | None:
        return value.char if value is not None else None

    @property
    def sentinel(self) -> str | None:
        return self.fen if self.fen in SENTINELS else None

    @property
    def snapshot(self) -> str | None:
        """Position string carried by a move message, if any."""
        if self.fen is None or self.sentinel is not None:
            return None
        return self.fen

    @property
    def reporter(self) -> Color | None:
        """Side that sent a RESIGN/DRAW sentinel (carried in ``from``)."""
        if self.sentinel is None or self.from_sq is None:
            return None
        try:
            return Color.parse(self.from_sq)
        except ValueError:
            return None

    @property
    def reported_clocks(self) -> tuple[int | None, int | None]:
        """(white, black) seconds; ``0`` reads as "not reported"."""
        return (self.white_time or None, self.black_time or None)

    def to_move(self) -> Move | None:
        """Move carried by this message; ``None`` for sentinels or bad squares."""
        if self.sentinel is not None or not self.from_sq or not self.to_sq:
            return None
        try:
            return Move(self.from_sq, self.to_sq, self.promotion)
        except ValueError:
            return None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# ── Builders ─────────────────────────────────────────────────────────────────


def move_message(room_id: str | None, record: MoveRecord, fen: str) -> WireMessage:
    """Announce a committed local move together with the resulting FEN."""
    return WireMessage(
        room_id=room_id,
        from_sq=record.from_sq,
        to_sq=record.to_sq,
        promotion=record.promotion,
        fen=fen,
    )


def signal_message(room_id: str | None, sentinel: str, color: Color | None = None) -> WireMessage:
    if sentinel not in SENTINELS:
        raise ValueError(f"Unknown sentinel: {sentinel!r}")
    return WireMessage(
        room_id=room_id,
        from_sq=color.wire_name if color is not None else None,
        fen=sentinel,
    )


# ── Decoding ─────────────────────────────────────────────────────────────────


def decode_message(raw: str | bytes) -> WireMessage:
    """Parse one JSON payload; raises ``pydantic.ValidationError`` when malformed."""
    return WireMessage.model_validate_json(raw)

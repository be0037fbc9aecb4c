"""Session bootstrap from the room create/join response."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chesslink.config import SessionSettings
from chesslink.core.enums import Color
from chesslink.game.controller import SessionController
from chesslink.game.interfaces import MoveSelector
from chesslink.net.channel import RoomChannel
from chesslink.net.protocol import Seconds
from chesslink.net.stomp import StompTransport
from chesslink.net.transport import ITransport


class SessionBootstrap(BaseModel):
    """Join payload ``{roomId, color, playerId, fen?, whiteTime?, blackTime?}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    room_id: str = Field(alias="roomId", min_length=1)
    color: Color
    player_id: str = Field(alias="playerId", min_length=1)
    fen: str | None = None
    white_time: Seconds | None = Field(default=None, alias="whiteTime")
    black_time: Seconds | None = Field(default=None, alias="blackTime")

    @field_validator("color", mode="plain")
    @classmethod
    def _validate_color(cls, value: Any) -> Color:
        if isinstance(value, Color):
            return value
        if value == "spectator":
            raise ValueError("Spectator sessions are not supported")
        return Color.parse(value)

    @field_validator("fen", mode="before")
    @classmethod
    def _validate_fen(cls, value: Any) -> Any:
        # "start" (or nothing) means the standard initial position.
        if value == "start" or not value:
            return None
        return value

    @field_validator("white_time", "black_time", mode="before")
    @classmethod
    def _unset_time(cls, value: Any) -> Any:
        # The server reports unset clocks as 0.
        if value == 0 and not isinstance(value, bool):
            return None
        return value

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SessionBootstrap:
        """Validate a decoded join response; raises ``pydantic.ValidationError``."""
        return cls.model_validate(data)


# ── Factories ────────────────────────────────────────────────────────────────


def connect_stomp(settings: SessionSettings | None = None) -> StompTransport:
    """Build a STOMP transport for ``settings.server_url`` and start connecting."""
    settings = settings or SessionSettings()
    transport = StompTransport(settings.server_url)
    transport.open()
    return transport


def open_room_session(
    bootstrap: SessionBootstrap,
    transport: ITransport | None = None,
    settings: SessionSettings | None = None,
) -> SessionController:
    """Create and start a networked session for *bootstrap*.

    Without an explicit *transport* a STOMP connection to
    ``settings.server_url`` is opened.
    """
    settings = settings or SessionSettings()
    if transport is None:
        transport = connect_stomp(settings)
    else:
        transport.open()
    controller = SessionController(
        settings, channel=RoomChannel(transport, bootstrap.room_id)
    )
    controller.start(
        bootstrap.color,
        room_id=bootstrap.room_id,
        fen=bootstrap.fen,
        white_time=bootstrap.white_time,
        black_time=bootstrap.black_time,
    )
    return controller


def open_bot_session(
    color: Color,
    settings: SessionSettings | None = None,
    selector: MoveSelector | None = None,
    fen: str | None = None,
) -> SessionController:
    """Create and start a local game against the bot (no transport)."""
    controller = SessionController(settings, selector=selector)
    controller.start(color, fen=fen, vs_bot=True)
    return controller

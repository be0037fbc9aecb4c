"""Transport adapter layer — wire schema, channels and transports."""

from chesslink.net.channel import RoomChannel
from chesslink.net.protocol import (
    DRAW,
    PLAYER_JOINED,
    RESIGN,
    WireMessage,
    decode_message,
)
from chesslink.net.stomp import StompFrame, StompTransport
from chesslink.net.transport import (
    MOVE_DESTINATION,
    LoopbackBroker,
    LoopbackTransport,
    ITransport,
    room_topic,
)

__all__ = [
    # Wire schema
    "DRAW",
    "PLAYER_JOINED",
    "RESIGN",
    "WireMessage",
    "decode_message",
    # Transports
    "LoopbackBroker",
    "LoopbackTransport",
    "MOVE_DESTINATION",
    "RoomChannel",
    "StompFrame",
    "StompTransport",
    "ITransport",
    "room_topic",
]

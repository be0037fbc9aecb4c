"""RoomChannel — translates session intents to and from room payloads."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from chesslink.core.enums import Color
from chesslink.core.move import MoveRecord
from chesslink.net.protocol import (
    WireMessage,
    decode_message,
    move_message,
    signal_message,
)
from chesslink.net.transport import (
    MOVE_DESTINATION,
    ConnectionListener,
    ITransport,
    room_topic,
)

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[WireMessage], None]


class RoomChannel:
    """One room's topic subscription plus the shared send destination."""

    __slots__ = ("_transport", "_room_id", "_handler")

    def __init__(self, transport: ITransport, room_id: str) -> None:
        self._transport = transport
        self._room_id = room_id
        self._handler: MessageHandler | None = None

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def transport(self) -> ITransport:
        return self._transport

    @property
    def topic(self) -> str:
        return room_topic(self._room_id)

    @property
    def connected(self) -> bool:
        return self._transport.connected

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._transport.add_connection_listener(listener)

    def open(self, handler: MessageHandler) -> None:
        """Subscribe to the room topic; *handler* gets decoded messages."""
        self._handler = handler
        self._transport.subscribe(self.topic, self._on_payload)

    def close(self) -> None:
        if self._handler is None:
            return
        self._handler = None
        self._transport.unsubscribe(self.topic)

    # ── Outbound ─────────────────────────────────────────────────────────

    def send(self, message: WireMessage) -> bool:
        """Fire-and-forget publish; ``False`` when it was not handed off."""
        if not self._transport.connected:
            _LOGGER.debug("Not connected; dropping outbound %s", message)
            return False
        return self._transport.publish(MOVE_DESTINATION, message.encode())

    def send_move(self, record: MoveRecord, fen: str) -> bool:
        return self.send(move_message(self._room_id, record, fen))

    def send_signal(self, sentinel: str, color: Color | None = None) -> bool:
        return self.send(signal_message(self._room_id, sentinel, color))

    # ── Inbound ──────────────────────────────────────────────────────────

    def _on_payload(self, raw: str) -> None:
        if self._handler is None:
            return
        try:
            message = decode_message(raw)
        except ValidationError as exc:
            _LOGGER.warning("Dropping malformed payload on %s: %s", self.topic, exc)
            return
        self._handler(message)

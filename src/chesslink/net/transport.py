"""Publish/subscribe transport contract and an in-process implementation.

The session only needs "publish to destination" and "receive from topic"
with at-most-once, unordered delivery.  :class:`LoopbackBroker` plays the
relay server for bot-free local games and tests: it re-broadcasts
everything sent to :data:`MOVE_DESTINATION` onto the sender's room topic.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from PyQt6.QtCore import QTimer

_LOGGER = logging.getLogger(__name__)

MOVE_DESTINATION = "/app/move"

PayloadHandler = Callable[[str], None]
ConnectionListener = Callable[[bool], None]


def room_topic(room_id: str) -> str:
    """Topic shared by both participants of *room_id*."""
    return f"/topic/room/{room_id}"


# ── Abstract interface ───────────────────────────────────────────────────────


class ITransport(ABC):
    """Publish/subscribe connection used by :class:`RoomChannel`."""

    __slots__ = ()

    @property
    @abstractmethod
    def connected(self) -> bool: ...

    @abstractmethod
    def open(self) -> None:
        """Start connecting; idempotent once connected."""

    @abstractmethod
    def add_connection_listener(self, listener: ConnectionListener) -> None:
        """Call *listener* with the new state whenever it changes."""

    @abstractmethod
    def subscribe(self, topic: str, handler: PayloadHandler) -> None:
        """Route raw payloads arriving on *topic* to *handler*."""

    @abstractmethod
    def unsubscribe(self, topic: str) -> None: ...

    @abstractmethod
    def publish(self, destination: str, payload: str) -> bool:
        """Hand *payload* off; ``False`` if it could not be sent."""

    @abstractmethod
    def close(self) -> None: ...


# ── In-process broker ────────────────────────────────────────────────────────


class LoopbackBroker:
    """In-memory relay with a visible delivery queue.

    Deliveries are queued as ``(topic, payload)`` pairs.  With
    ``auto_deliver`` the queue is flushed from the Qt event loop; otherwise
    call :meth:`flush`.  Tests may edit :attr:`pending` to drop, duplicate
    or reorder deliveries before flushing.
    """

    __slots__ = ("__weakref__", "_clients", "_auto_deliver", "_flush_scheduled", "pending")

    def __init__(self, *, auto_deliver: bool = True) -> None:
        self._clients: list[LoopbackTransport] = []
        self._auto_deliver = auto_deliver
        self._flush_scheduled = False
        self.pending: list[tuple[str, str]] = []

    def connect(self) -> LoopbackTransport:
        """Create a new connected client."""
        client = LoopbackTransport(self)
        client.open()
        return client

    def attach(self, client: LoopbackTransport) -> None:
        if client not in self._clients:
            self._clients.append(client)

    def detach(self, client: LoopbackTransport) -> None:
        if client in self._clients:
            self._clients.remove(client)

    def announce_join(self, room_id: str) -> None:
        """Broadcast the join sentinel, as the room server does on join."""
        payload = json.dumps({"roomId": room_id, "fen": "PLAYER_JOINED"})
        self.inject(room_topic(room_id), payload)

    def receive(self, destination: str, payload: str) -> None:
        """Accept a client publish and relay it to the room topic."""
        if destination != MOVE_DESTINATION:
            self.inject(destination, payload)
            return
        try:
            room_id = json.loads(payload).get("roomId")
        except (ValueError, AttributeError):
            room_id = None
        if not room_id:
            _LOGGER.warning("Dropping %s payload without roomId", destination)
            return
        self.inject(room_topic(room_id), payload)

    def inject(self, topic: str, payload: str) -> None:
        """Queue *payload* for every subscriber of *topic*."""
        self.pending.append((topic, payload))
        if self._auto_deliver and not self._flush_scheduled:
            self._flush_scheduled = True
            QTimer.singleShot(0, self.flush)

    def flush(self) -> int:
        """Deliver everything queued so far; returns the delivery count."""
        self._flush_scheduled = False
        delivered = 0
        while self.pending:
            topic, payload = self.pending.pop(0)
            for client in list(self._clients):
                if client._deliver(topic, payload):
                    delivered += 1
        return delivered


class LoopbackTransport(ITransport):
    """Client side of :class:`LoopbackBroker`."""

    __slots__ = ("_broker", "_connected", "_handlers", "_listeners")

    def __init__(self, broker: LoopbackBroker) -> None:
        self._broker = broker
        self._connected = False
        self._handlers: dict[str, PayloadHandler] = {}
        self._listeners: list[ConnectionListener] = []

    @property
    def connected(self) -> bool:
        return self._connected

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._listeners.append(listener)

    def subscribe(self, topic: str, handler: PayloadHandler) -> None:
        self._handlers[topic] = handler

    def unsubscribe(self, topic: str) -> None:
        self._handlers.pop(topic, None)

    def publish(self, destination: str, payload: str) -> bool:
        if not self._connected:
            return False
        self._broker.receive(destination, payload)
        return True

    def open(self) -> None:
        self._broker.attach(self)
        self._set_connected(True)

    def close(self) -> None:
        self._handlers.clear()
        self._broker.detach(self)
        self._set_connected(False)

    def drop(self) -> None:
        """Simulate a lost connection (no automatic retry)."""
        self._set_connected(False)

    # ── Internal ─────────────────────────────────────────────────────────

    def _deliver(self, topic: str, payload: str) -> bool:
        handler = self._handlers.get(topic)
        if handler is None or not self._connected:
            return False
        handler(payload)
        return True

    def _set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        for listener in list(self._listeners):
            listener(connected)

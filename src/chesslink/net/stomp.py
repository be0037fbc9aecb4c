"""STOMP 1.2 over a raw Qt websocket.

Only the client frames a room needs are implemented: ``CONNECT``,
``SUBSCRIBE``, ``UNSUBSCRIBE``, ``SEND`` and ``DISCONNECT``.  A dropped
socket is reported through the connection listeners and never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtNetwork import QAbstractSocket
from PyQt6.QtWebSockets import QWebSocket

from chesslink.net.transport import ConnectionListener, ITransport, PayloadHandler

_LOGGER = logging.getLogger(__name__)

_NULL = "\x00"
_ESCAPES = (("\\", "\\\\"), ("\r", "\\r"), ("\n", "\\n"), (":", "\\c"))
_UNESCAPES = {"\\\\": "\\", "\\r": "\r", "\\n": "\n", "\\c": ":"}


@dataclass(frozen=True, slots=True)
class StompFrame:
    """One STOMP frame."""

    command: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""


# ── Frame codec ──────────────────────────────────────────────────────────────


def _escape(value: str) -> str:
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    return value


def _unescape(value: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\":
            pair = value[i : i + 2]
            if pair not in _UNESCAPES:
                raise ValueError(f"Invalid STOMP header escape: {pair!r}")
            out.append(_UNESCAPES[pair])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def encode_frame(frame: StompFrame) -> str:
    """Serialise *frame*; CONNECT headers are not escaped (STOMP 1.2)."""
    lines = [frame.command]
    escape = frame.command != "CONNECT"
    for key, value in frame.headers.items():
        if escape:
            key, value = _escape(key), _escape(value)
        lines.append(f"{key}:{value}")
    return "\n".join(lines) + "\n\n" + frame.body + _NULL


def decode_frames(buffer: str) -> tuple[list[StompFrame], str]:
    """Split *buffer* into complete frames plus the unconsumed remainder.

    Heart-beat EOLs between frames are skipped.
    """
    frames: list[StompFrame] = []
    rest = buffer
    while True:
        rest = rest.lstrip("\r\n")
        end = rest.find(_NULL)
        if end < 0:
            return frames, rest
        frames.append(_parse_frame(rest[:end]))
        rest = rest[end + 1 :]


def _parse_frame(text: str) -> StompFrame:
    head, sep, body = text.partition("\n\n")
    if not sep:
        head, sep, body = text.partition("\r\n\r\n")
    lines = head.replace("\r\n", "\n").split("\n")
    command = lines[0].strip()
    if not command:
        raise ValueError("STOMP frame without a command")
    escaped = command != "CONNECTED"
    headers: dict[str, str] = {}
    for line in lines[1:]:
        if not line:
            continue
        key, colon, value = line.partition(":")
        if not colon:
            raise ValueError(f"Malformed STOMP header line: {line!r}")
        if escaped:
            key, value = _unescape(key), _unescape(value)
        # Repeated headers: the first occurrence wins.
        headers.setdefault(key, value)
    return StompFrame(command, headers, body)


# ── Transport ────────────────────────────────────────────────────────────────


class StompTransport(ITransport):
    """:class:`~chesslink.net.transport.ITransport` backed by ``QWebSocket``."""

    __slots__ = (
        "__weakref__",
        "_url",
        "_host",
        "_socket",
        "_buffer",
        "_connected",
        "_listeners",
        "_subscriptions",
        "_next_id",
    )

    def __init__(
        self,
        url: str,
        *,
        host: str = "localhost",
        parent: QObject | None = None,
    ) -> None:
        self._url = url
        self._host = host
        self._socket = QWebSocket("", parent=parent)
        self._buffer = ""
        self._connected = False
        self._listeners: list[ConnectionListener] = []
        # topic -> (subscription id, handler)
        self._subscriptions: dict[str, tuple[str, PayloadHandler]] = {}
        self._next_id = 0

        self._socket.connected.connect(self._on_socket_connected)
        self._socket.disconnected.connect(self._on_socket_disconnected)
        self._socket.textMessageReceived.connect(self._on_text)
        self._socket.errorOccurred.connect(self._on_socket_error)

    # ── ITransport ──────────────────────────────────────────────────────────

    @property
    def connected(self) -> bool:
        return self._connected

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._listeners.append(listener)

    @property
    def url(self) -> str:
        return self._url

    def open(self) -> None:
        """Start the websocket handshake; STOMP CONNECT follows."""
        if self._connected:
            return
        _LOGGER.info("Opening STOMP socket %s", self._url)
        self._socket.open(QUrl(self._url))

    def subscribe(self, topic: str, handler: PayloadHandler) -> None:
        if topic in self._subscriptions:
            self._subscriptions[topic] = (self._subscriptions[topic][0], handler)
            return
        sub_id = f"sub-{self._next_id}"
        self._next_id += 1
        self._subscriptions[topic] = (sub_id, handler)
        if self._connected:
            self._send_subscribe(topic, sub_id)

    def unsubscribe(self, topic: str) -> None:
        entry = self._subscriptions.pop(topic, None)
        if entry is not None and self._connected:
            self._send_frame(StompFrame("UNSUBSCRIBE", {"id": entry[0]}))

    def publish(self, destination: str, payload: str) -> bool:
        if not self._connected:
            _LOGGER.debug("STOMP not connected; dropping SEND to %s", destination)
            return False
        self._send_frame(
            StompFrame(
                "SEND",
                {"destination": destination, "content-type": "application/json"},
                payload,
            )
        )
        return True

    def close(self) -> None:
        if self._connected:
            self._send_frame(StompFrame("DISCONNECT"))
        self._subscriptions.clear()
        self._socket.close()
        self._set_connected(False)

    # ── Socket slots ─────────────────────────────────────────────────────

    def _on_socket_connected(self) -> None:
        self._buffer = ""
        self._send_frame(
            StompFrame(
                "CONNECT",
                {"accept-version": "1.2", "host": self._host, "heart-beat": "0,0"},
            )
        )

    def _on_socket_disconnected(self) -> None:
        self._set_connected(False)

    def _on_socket_error(self, error: QAbstractSocket.SocketError) -> None:
        _LOGGER.warning("STOMP socket error %s: %s", error, self._socket.errorString())
        self._set_connected(False)

    def _on_text(self, text: str) -> None:
        try:
            frames, self._buffer = decode_frames(self._buffer + text)
        except ValueError as exc:
            _LOGGER.warning("Discarding undecodable STOMP data: %s", exc)
            self._buffer = ""
            return
        for frame in frames:
            self._handle_frame(frame)

    # ── Internal ─────────────────────────────────────────────────────────

    def _handle_frame(self, frame: StompFrame) -> None:
        if frame.command == "CONNECTED":
            self._set_connected(True)
            for topic, (sub_id, _handler) in self._subscriptions.items():
                self._send_subscribe(topic, sub_id)
        elif frame.command == "MESSAGE":
            handler = self._handler_for(frame)
            if handler is not None:
                handler(frame.body)
        elif frame.command == "ERROR":
            _LOGGER.error(
                "STOMP error: %s %s", frame.headers.get("message", ""), frame.body
            )
        else:
            _LOGGER.debug("Ignoring STOMP frame %s", frame.command)

    def _handler_for(self, frame: StompFrame) -> PayloadHandler | None:
        sub_id = frame.headers.get("subscription")
        destination = frame.headers.get("destination")
        for topic, (known_id, handler) in self._subscriptions.items():
            if known_id == sub_id or (sub_id is None and topic == destination):
                return handler
        return None

    def _send_subscribe(self, topic: str, sub_id: str) -> None:
        self._send_frame(StompFrame("SUBSCRIBE", {"id": sub_id, "destination": topic}))

    def _send_frame(self, frame: StompFrame) -> None:
        self._socket.sendTextMessage(encode_frame(frame))

    def _set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        for listener in list(self._listeners):
            listener(connected)

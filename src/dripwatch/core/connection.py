from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QEventLoop, QObject, QTimer, QUrl, Signal
from PySide6.QtWebSockets import QWebSocket, QWebSocketProtocol

from dripwatch.core.errors import ClosedDuringHandshake, ConnectError, ConnectTimeout, TransportError
from dripwatch.core.models import (
    CONNECTED,
    CONNECTING,
    DISCONNECTED,
    FAILED,
    ConnectionState,
    DeviceEndpoint,
)

logger = logging.getLogger("dripwatch.connection")

SocketFactory = Callable[[], QWebSocket]

NORMAL_CLOSURE = QWebSocketProtocol.CloseCode.CloseCodeNormal.value


class ConnectionManager(QObject):
    """
    Owns the single websocket to a drip sensor.

    Every callback (socket signals and the connect timer) runs on the
    thread that owns this object, so lifecycle handling is serialized.
    The socket never leaves this class; callers only issue
    connect_to_device()/close() and read status().
    """

    state_changed = Signal(str)
    message_received = Signal(object)  # str for text frames, bytes for binary ones
    connected = Signal()
    connect_failed = Signal(object)  # ConnectError

    def __init__(self, socket_factory: SocketFactory | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._socket_factory: SocketFactory = socket_factory or QWebSocket
        self._socket: QWebSocket | None = None
        self._state: ConnectionState = DISCONNECTED
        self._endpoint: DeviceEndpoint | None = None
        self._last_error: ConnectError | None = None
        self._timeout_ms = 0

        self._connect_timer = QTimer(self)
        self._connect_timer.setSingleShot(True)
        self._connect_timer.timeout.connect(self._on_connect_timeout)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def status(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == CONNECTED

    @property
    def endpoint(self) -> DeviceEndpoint | None:
        return self._endpoint

    @property
    def last_error(self) -> ConnectError | None:
        return self._last_error

    @property
    def has_socket(self) -> bool:
        return self._socket is not None

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    def on_message(self, handler: Callable[[object], None]) -> None:
        self.message_received.connect(handler)

    def connect_to_device(self, endpoint: DeviceEndpoint, timeout_ms: int) -> None:
        """Start a connect attempt; the outcome arrives as connected or connect_failed."""
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        if self._socket is not None:
            logger.info("dropping previous socket to %s before new attempt", self._endpoint)
            self.close()

        self._endpoint = endpoint
        self._last_error = None
        self._timeout_ms = int(timeout_ms)

        sock = self._socket_factory()
        self._socket = sock
        self._attach(sock)
        self._set_state(CONNECTING)

        logger.info("connecting url=%s timeout_ms=%s", endpoint.url, self._timeout_ms)
        self._connect_timer.start(self._timeout_ms)
        sock.open(QUrl(endpoint.url))

    def wait_connected(self, endpoint: DeviceEndpoint, timeout_ms: int) -> bool:
        """
        Connect and spin a local event loop until the attempt resolves.

        Returns True once open, False if close() cancelled the attempt,
        and raises the ConnectError of a failed attempt.
        """
        loop = QEventLoop()
        outcome: dict[str, ConnectError] = {}

        def _failed(err: ConnectError) -> None:
            outcome["error"] = err
            loop.quit()

        def _state(state: str) -> None:
            if state == DISCONNECTED:
                loop.quit()

        self.connected.connect(loop.quit)
        self.connect_failed.connect(_failed)
        self.state_changed.connect(_state)
        try:
            self.connect_to_device(endpoint, timeout_ms)
            if self._state == CONNECTING:
                loop.exec()
        finally:
            self.connected.disconnect(loop.quit)
            self.connect_failed.disconnect(_failed)
            self.state_changed.disconnect(_state)

        if "error" in outcome:
            raise outcome["error"]
        return self._state == CONNECTED

    def close(self) -> None:
        """Close the socket if there is one; safe to call repeatedly."""
        if self._socket is None:
            self._connect_timer.stop()
            return
        logger.info("closing connection to %s state=%s", self._endpoint, self._state)
        self._teardown()
        self._set_state(DISCONNECTED)

    # ------------------------------------------------------------------
    # socket plumbing
    # ------------------------------------------------------------------

    def _attach(self, sock: QWebSocket) -> None:
        sock.connected.connect(self._on_open)
        sock.disconnected.connect(self._on_closed)
        sock.errorOccurred.connect(self._on_error)
        sock.textMessageReceived.connect(self._on_text)
        sock.binaryMessageReceived.connect(self._on_binary)

    def _detach(self, sock: QWebSocket) -> None:
        sock.connected.disconnect(self._on_open)
        sock.disconnected.disconnect(self._on_closed)
        sock.errorOccurred.disconnect(self._on_error)
        sock.textMessageReceived.disconnect(self._on_text)
        sock.binaryMessageReceived.disconnect(self._on_binary)

    def _teardown(self) -> None:
        self._connect_timer.stop()
        sock = self._socket
        self._socket = None
        if sock is None:
            return
        self._detach(sock)
        if self._state == CONNECTED:
            sock.close()
        else:
            sock.abort()
        sock.deleteLater()

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        logger.info("connection state %s->%s endpoint=%s", self._state, state, self._endpoint)
        self._state = state
        self.state_changed.emit(state)

    def _fail_attempt(self, error: ConnectError) -> None:
        self._last_error = error
        self._teardown()
        self._set_state(FAILED)
        logger.warning("connect to %s failed: %s", self._endpoint, error)
        self.connect_failed.emit(error)

    def _on_open(self) -> None:
        if self._state != CONNECTING:
            return
        self._connect_timer.stop()
        self._set_state(CONNECTED)
        self.connected.emit()

    def _on_error(self, _error: object) -> None:
        sock = self._socket
        detail = sock.errorString() if sock is not None else ""
        if self._state == CONNECTING:
            self._fail_attempt(TransportError(detail))
            return
        logger.warning("socket error on %s: %s", self._endpoint, detail)
        self._teardown()
        self._set_state(FAILED)

    def _on_closed(self) -> None:
        sock = self._socket
        if sock is None:
            return
        code = sock.closeCode().value
        reason = sock.closeReason()
        if self._state == CONNECTING:
            self._fail_attempt(ClosedDuringHandshake(code, reason))
            return
        logger.info("socket closed by peer code=%s reason=%r", code, reason)
        self._teardown()
        self._set_state(DISCONNECTED if code == NORMAL_CLOSURE else FAILED)

    def _on_connect_timeout(self) -> None:
        if self._state != CONNECTING or self._socket is None:
            return
        self._fail_attempt(ConnectTimeout(self._timeout_ms))

    def _on_text(self, message: str) -> None:
        if self._socket is None:
            return
        self.message_received.emit(message)

    def _on_binary(self, data) -> None:
        if self._socket is None:
            return
        self.message_received.emit(bytes(data))

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtWebSockets import QWebSocketProtocol

from dripwatch.core.models import DeviceEndpoint


class FakeSocket(QObject):
    """Stands in for QWebSocket; tests drive its signals by hand."""

    connected = Signal()
    disconnected = Signal()
    errorOccurred = Signal(object)
    textMessageReceived = Signal(str)
    binaryMessageReceived = Signal(object)

    def __init__(self, auto: str | None = None) -> None:
        super().__init__()
        self.auto = auto
        self.opened_url: str | None = None
        self.closed = False
        self.aborted = False
        self.deleted = False
        self._close_code = QWebSocketProtocol.CloseCode.CloseCodeNormal
        self._close_reason = ""
        self._error = ""

    # QWebSocket surface used by ConnectionManager
    def open(self, url) -> None:
        self.opened_url = url.toString()
        if self.auto == "accept":
            QTimer.singleShot(10, self.accept)
        elif self.auto == "refuse":
            QTimer.singleShot(10, lambda: self.fail("Connection refused"))

    def close(self, *args) -> None:
        self.closed = True

    def abort(self) -> None:
        self.aborted = True

    def deleteLater(self) -> None:
        # keep the wrapper alive so tests can inspect it after teardown
        self.deleted = True

    def closeCode(self):
        return self._close_code

    def closeReason(self) -> str:
        return self._close_reason

    def errorString(self) -> str:
        return self._error

    # test helpers
    def accept(self) -> None:
        self.connected.emit()

    def fail(self, detail: str) -> None:
        self._error = detail
        self.errorOccurred.emit(None)

    def drop(self, code, reason: str = "") -> None:
        self._close_code = code
        self._close_reason = reason
        self.disconnected.emit()

    def send_text(self, message: str) -> None:
        self.textMessageReceived.emit(message)


class SocketFactory:
    def __init__(self, auto: str | None = None) -> None:
        self.auto = auto
        self.created: list[FakeSocket] = []

    def __call__(self) -> FakeSocket:
        sock = FakeSocket(auto=self.auto)
        self.created.append(sock)
        return sock

    @property
    def last(self) -> FakeSocket:
        return self.created[-1]


class DummyPlayer:
    def __init__(self, acquire_ok: bool = True) -> None:
        self.acquire_ok = acquire_ok
        self.acquired = 0
        self.started = 0
        self.stopped = 0
        self.released = 0

    def acquire(self) -> bool:
        self.acquired += 1
        return self.acquire_ok

    def start(self) -> None:
        self.started += 1

    def stop(self) -> None:
        self.stopped += 1

    def release(self) -> None:
        self.released += 1


@pytest.fixture
def sockets() -> SocketFactory:
    return SocketFactory()


@pytest.fixture
def player() -> DummyPlayer:
    return DummyPlayer()


@pytest.fixture
def endpoint() -> DeviceEndpoint:
    return DeviceEndpoint("192.168.194.50", 8000)

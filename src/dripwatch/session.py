"""
Monitor session.

One session == one monitored device connection plus its alert cue.

Responsibilities:
- Owns the ConnectionManager and the AlertDriver
- Feeds inbound frames through classify() in arrival order
- Drives the alert cue from classifier output
- Exposes read-only state for whatever presentation sits on top

Construct it explicitly and pass it to consumers; call shutdown() once
when the session ends.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

from dripwatch.config import DEFAULT_CONNECT_TIMEOUT_MS, MonitorConfig
from dripwatch.core.alerts import AlertDriver
from dripwatch.core.classifier import classify
from dripwatch.core.connection import ConnectionManager, SocketFactory
from dripwatch.core.errors import ConnectError, describe_connect_failure
from dripwatch.core.models import UNKNOWN, ConnectionState, Device, DripStatus
from dripwatch.services.sound import AlertSound

logger = logging.getLogger("dripwatch.session")

_STATUS_LABELS = {
    "STOPPED": "DRIP STOPPED",
    "BLOCKED": "DRIP BLOCKED",
    "NORMAL": "NORMAL DRIP",
}


class MonitorSession(QObject):
    connection_changed = Signal(str)
    status_changed = Signal(object)  # DripStatus
    alert_changed = Signal(bool)
    connect_failed = Signal(str)  # human readable

    def __init__(
        self,
        *,
        connection: ConnectionManager,
        alert_driver: AlertDriver,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._connection = connection
        self._alerts = alert_driver
        self._connect_timeout_ms = int(connect_timeout_ms)

        self._device: Device | None = None
        self._status: DripStatus | None = None
        self._last_rate: int | None = None
        self._error_message = ""
        self._started = False
        self._closed = False

        self._connection.state_changed.connect(self._on_connection_state)
        self._connection.connect_failed.connect(self._on_connect_failed)
        self._connection.on_message(self._on_message)

    @classmethod
    def from_config(cls, config: MonitorConfig, *, socket_factory: SocketFactory | None = None) -> MonitorSession:
        sound = AlertSound(config.alert_sound, volume=config.alert_volume)
        return cls(
            connection=ConnectionManager(socket_factory=socket_factory),
            alert_driver=AlertDriver(sound),
            connect_timeout_ms=config.connect_timeout_ms,
        )

    # ------------------------------------------------------------------
    # read-only state
    # ------------------------------------------------------------------

    @property
    def device(self) -> Device | None:
        return self._device

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection.status()

    @property
    def drip_status(self) -> DripStatus | None:
        return self._status

    @property
    def alert_active(self) -> bool:
        return self._alerts.alerting

    @property
    def last_rate(self) -> int | None:
        return self._last_rate

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def status_label(self) -> str:
        if self._status is None:
            return "UNKNOWN STATUS"
        return _STATUS_LABELS.get(self._status.kind, "UNKNOWN STATUS")

    @property
    def connection_label(self) -> str:
        return "Connected" if self._connection.is_connected else "Disconnected"

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._alerts.open()

    def connect_device(self, device: Device, timeout_ms: int | None = None) -> None:
        if self._closed:
            raise RuntimeError("session already shut down")
        self._reset_for(device)
        logger.info("connect requested device=%s endpoint=%s", device.name, device.endpoint)
        self._connection.connect_to_device(device.endpoint, self._timeout_for(timeout_ms))

    def wait_for_device(self, device: Device, timeout_ms: int | None = None) -> bool:
        """Blocking-style connect; raises ConnectError with the session state already updated."""
        if self._closed:
            raise RuntimeError("session already shut down")
        self._reset_for(device)
        return self._connection.wait_connected(device.endpoint, self._timeout_for(timeout_ms))

    def disconnect(self) -> None:
        """User-initiated disconnect: close the socket and silence the cue."""
        self._connection.close()
        self._apply_status(UNKNOWN)

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("session shutdown device=%s", self._device.name if self._device else None)
        self._connection.close()
        self._alerts.close()

    def _timeout_for(self, timeout_ms: int | None) -> int:
        # 0 is passed through so the manager rejects it
        return self._connect_timeout_ms if timeout_ms is None else int(timeout_ms)

    def _reset_for(self, device: Device) -> None:
        self._device = device
        self._error_message = ""
        self._status = None
        self._last_rate = None
        # a previous device's alarm must not carry over
        if self._alerts.feed(UNKNOWN) is not None:
            self.alert_changed.emit(False)

    # ------------------------------------------------------------------
    # connection callbacks
    # ------------------------------------------------------------------

    def _on_connection_state(self, state: str) -> None:
        self.connection_changed.emit(state)

    def _on_connect_failed(self, error: ConnectError) -> None:
        name = self._device.name if self._device else str(self._connection.endpoint)
        self._error_message = describe_connect_failure(name, error)
        logger.warning("%s", self._error_message)
        self.connect_failed.emit(self._error_message)

    def _on_message(self, raw: object) -> None:
        self._apply_status(classify(raw))

    def _apply_status(self, status: DripStatus) -> None:
        previous = self._status
        self._status = status
        if status.kind == "NORMAL":
            if status.rate is not None:
                self._last_rate = status.rate
        else:
            self._last_rate = None

        if previous != status:
            logger.info(
                "drip status %s->%s rate=%s",
                previous.kind if previous else None,
                status.kind,
                status.rate,
            )
            self.status_changed.emit(status)

        transition = self._alerts.feed(status)
        if transition is not None:
            self.alert_changed.emit(transition.current == "ALERTING")

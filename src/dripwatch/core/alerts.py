from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from dripwatch.core.models import DripStatus

logger = logging.getLogger("dripwatch.alerts")

AlertPhase = Literal["IDLE", "ALERTING"]


class AlertPlayer(Protocol):
    def acquire(self) -> bool: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def release(self) -> None: ...


@dataclass(frozen=True)
class AlertTransition:
    previous: AlertPhase
    current: AlertPhase
    status: DripStatus


class AlertDriver:
    """
    Level-triggered alert state machine (IDLE <-> ALERTING).

    The cue starts on IDLE -> ALERTING and stops (rewound) on
    ALERTING -> IDLE. Repeated statuses on either side do nothing.
    The player is acquired once by open() and released once by close(),
    which also drops the driver back to IDLE;
    if acquisition fails the driver keeps tracking state silently.
    """

    def __init__(self, player: AlertPlayer | None = None) -> None:
        self._player = player
        self._phase: AlertPhase = "IDLE"
        self._acquired = False
        self._released = False

    @property
    def phase(self) -> AlertPhase:
        return self._phase

    @property
    def alerting(self) -> bool:
        return self._phase == "ALERTING"

    @property
    def silent(self) -> bool:
        return not self._acquired

    def open(self) -> bool:
        if self._acquired or self._released or self._player is None:
            return self._acquired
        try:
            self._acquired = bool(self._player.acquire())
        except Exception:
            logger.exception("alert player acquisition failed, running silent")
            self._acquired = False
        if not self._acquired:
            logger.warning("alert cue unavailable, alerts will be silent")
        return self._acquired

    def close(self) -> None:
        if self._released:
            return
        self._released = True
        was_alerting = self._phase == "ALERTING"
        self._phase = "IDLE"
        if not self._acquired or self._player is None:
            return
        if was_alerting:
            self._player.stop()
        self._player.release()
        self._acquired = False
        logger.info("alert player released")

    def feed(self, status: DripStatus) -> Optional[AlertTransition]:
        previous = self._phase
        current: AlertPhase = "ALERTING" if status.is_alert else "IDLE"
        if current == previous:
            return None

        self._phase = current
        logger.info("alert transition %s->%s status=%s", previous, current, status.kind)
        if self._acquired and self._player is not None:
            if current == "ALERTING":
                self._player.start()
            else:
                self._player.stop()
        return AlertTransition(previous=previous, current=current, status=status)

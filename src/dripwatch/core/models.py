from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

ConnectionState = Literal["DISCONNECTED", "CONNECTING", "CONNECTED", "FAILED"]
DripKind = Literal["STOPPED", "BLOCKED", "NORMAL", "UNKNOWN"]

DISCONNECTED: ConnectionState = "DISCONNECTED"
CONNECTING: ConnectionState = "CONNECTING"
CONNECTED: ConnectionState = "CONNECTED"
FAILED: ConnectionState = "FAILED"

ALERT_KINDS: frozenset[str] = frozenset({"STOPPED", "BLOCKED"})


@dataclass(frozen=True)
class DeviceEndpoint:
    host: str
    port: int

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}/ws"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Device:
    id: int
    name: str
    endpoint: DeviceEndpoint


@dataclass(frozen=True)
class DripStatus:
    kind: DripKind
    rate: Optional[int] = None  # drops/min, only ever set for NORMAL

    @property
    def is_alert(self) -> bool:
        return self.kind in ALERT_KINDS


STOPPED = DripStatus("STOPPED")
BLOCKED = DripStatus("BLOCKED")
UNKNOWN = DripStatus("UNKNOWN")


def normal(rate: Optional[int] = None) -> DripStatus:
    if rate is not None and rate < 0:
        raise ValueError(f"drip rate must be non-negative, got {rate}")
    return DripStatus("NORMAL", rate)

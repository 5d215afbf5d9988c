from __future__ import annotations


class ConnectError(Exception):
    """A connect attempt ended before the socket opened."""

    reason: str = "Connection failed"

    def __str__(self) -> str:
        return self.reason


class ConnectTimeout(ConnectError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(timeout_ms)
        self.timeout_ms = int(timeout_ms)
        self.reason = "Connection timeout"


class TransportError(ConnectError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
        self.reason = f"Connection failed ({detail})" if detail else "Connection failed"


class ClosedDuringHandshake(ConnectError):
    def __init__(self, code: int, reason: str = "") -> None:
        super().__init__(code, reason)
        self.code = int(code)
        self.close_reason = reason
        self.reason = f"Connection closed: {reason or 'Unknown reason'} (code {self.code})"


def describe_connect_failure(device_name: str, error: BaseException) -> str:
    reason = str(error) if isinstance(error, ConnectError) else "Connection failed"
    return f"Failed to connect to {device_name}: {reason}"

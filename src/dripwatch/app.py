from __future__ import annotations

import argparse
import logging
import signal
import sys

from PySide6.QtCore import QTimer
from PySide6.QtGui import QGuiApplication

from dripwatch.config import MonitorConfig, get_paths
from dripwatch.core.discovery import discover_devices, find_device
from dripwatch.core.errors import ConnectError, describe_connect_failure
from dripwatch.logging_setup import setup_logging
from dripwatch.session import MonitorSession

logger = logging.getLogger("dripwatch.app")


def _positive_ms(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dripwatch", description="Monitor an infusion drip sensor.")
    p.add_argument("--device", default="1", help="device id or name (default: 1)")
    p.add_argument("--list", action="store_true", help="list known devices and exit")
    p.add_argument("--timeout-ms", type=_positive_ms, default=None, help="connect timeout in milliseconds")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = MonitorConfig.load_from_env()
    devices = discover_devices(config.devices_override)

    if args.list:
        for d in devices:
            print(f"{d.id}\t{d.name}\t{d.endpoint}")
        return 0

    device = find_device(devices, args.device)
    if device is None:
        print(f"unknown device: {args.device}", file=sys.stderr)
        return 2

    paths = get_paths()
    setup_logging(paths.log_file, config.log_level)

    app = QGuiApplication(sys.argv[:1])
    app.setApplicationName("dripwatch")

    session = MonitorSession.from_config(config)
    session.status_changed.connect(
        lambda st: logger.info("monitor %s rate=%s", session.status_label, session.last_rate)
    )
    session.connection_changed.connect(lambda _s: logger.info("link %s", session.connection_label))
    session.start()

    try:
        session.wait_for_device(device, args.timeout_ms)
    except ConnectError as e:
        print(describe_connect_failure(device.name, e), file=sys.stderr)
        session.shutdown()
        return 1

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # let the interpreter see SIGINT while Qt owns the loop
    pulse = QTimer()
    pulse.start(250)
    pulse.timeout.connect(lambda: None)

    try:
        return app.exec()
    finally:
        session.shutdown()


if __name__ == "__main__":
    sys.exit(main())

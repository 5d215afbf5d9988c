from __future__ import annotations

import logging

from dripwatch.core.models import Device, DeviceEndpoint
from dripwatch.core.net import parse_endpoint

logger = logging.getLogger("dripwatch.discovery")

DEFAULT_DEVICES: tuple[Device, ...] = (
    Device(id=1, name="Smart IV monitoring device", endpoint=DeviceEndpoint("192.168.194.50", 8000)),
    Device(id=2, name="Testing", endpoint=DeviceEndpoint("192.168.194.195", 8000)),
)


def parse_device_list(raw: str) -> list[Device]:
    """
    Parse "name@host:port;name@host:port" into devices.

    Bad entries are logged and skipped; ids follow the order of valid entries.
    """
    devices: list[Device] = []
    for chunk in raw.split(";"):
        entry = chunk.strip()
        if not entry:
            continue
        name, sep, target = entry.rpartition("@")
        if not sep or not name.strip():
            logger.warning("skipping device entry without name: %r", entry)
            continue
        try:
            endpoint = parse_endpoint(target)
        except ValueError as e:
            logger.warning("skipping device entry %r: %s", entry, e)
            continue
        devices.append(Device(id=len(devices) + 1, name=name.strip(), endpoint=endpoint))
    return devices


def discover_devices(override: str = "") -> list[Device]:
    if override.strip():
        devices = parse_device_list(override)
        if devices:
            logger.info("using %s configured devices", len(devices))
            return devices
        logger.warning("device override had no valid entries, using defaults")
    return list(DEFAULT_DEVICES)


def find_device(devices: list[Device], key: str) -> Device | None:
    """Look up by 1-based id or exact (case-insensitive) name."""
    key = key.strip()
    if key.isdigit():
        wanted = int(key)
        for d in devices:
            if d.id == wanted:
                return d
    for d in devices:
        if d.name.lower() == key.lower():
            return d
    return None

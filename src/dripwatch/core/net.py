from __future__ import annotations

import ipaddress
import re

from dripwatch.core.models import DeviceEndpoint


_HOST_LABEL_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
        return True
    except ipaddress.AddressValueError:
        return False


def is_valid_hostname(value: str) -> bool:
    host = value.strip()
    if not host:
        return False
    if host.endswith("."):
        host = host[:-1]
    if not host or len(host) > 253:
        return False
    labels = host.split(".")
    if len(labels) == 4 and all(label.isdigit() for label in labels):
        return False
    if any(len(label) == 0 for label in labels):
        return False
    for label in labels:
        if len(label) > 63:
            return False
        if not _HOST_LABEL_RE.match(label):
            return False
    return True


def is_valid_host(value: str) -> bool:
    return is_ipv4(value) or is_valid_hostname(value)


def is_valid_port(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536


def parse_endpoint(value: str) -> DeviceEndpoint:
    """Parse "host:port" into an endpoint, raising ValueError when malformed."""
    host, sep, port_raw = value.strip().rpartition(":")
    if not sep:
        raise ValueError(f"endpoint must look like host:port, got {value!r}")
    host = host.strip()
    if not is_valid_host(host):
        raise ValueError(f"invalid host {host!r}")
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"invalid port {port_raw!r}") from None
    if not is_valid_port(port):
        raise ValueError(f"port out of range: {port}")
    return DeviceEndpoint(host=host, port=port)

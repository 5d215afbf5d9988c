from __future__ import annotations

import re
from typing import Optional

from dripwatch.core.models import BLOCKED, STOPPED, UNKNOWN, DripStatus, normal

STOPPED_MARKERS: tuple[str, ...] = ("Drip stopped", "chamber filled")
BLOCKED_MARKERS: tuple[str, ...] = ("Drip too fast",)

_RATE_RE = re.compile(r"([0-9]+) drops/min")
MAX_RATE_DIGITS = 9


def extract_rate(message: str) -> Optional[int]:
    m = _RATE_RE.search(message)
    if m is None:
        return None
    digits = m.group(1).lstrip("0") or "0"
    if len(digits) > MAX_RATE_DIGITS:
        return None
    return int(digits)


def classify(raw: object) -> DripStatus:
    """
    Map one inbound frame to a drip status.

    Markers are matched case-sensitively, stopped before blocked, so a
    frame carrying both "Drip too fast" and "chamber filled" is STOPPED.
    Frames that are not text, or are blank, are UNKNOWN rather than NORMAL.
    """
    if not isinstance(raw, str) or not raw.strip():
        return UNKNOWN

    if any(marker in raw for marker in STOPPED_MARKERS):
        return STOPPED
    if any(marker in raw for marker in BLOCKED_MARKERS):
        return BLOCKED
    return normal(extract_rate(raw))

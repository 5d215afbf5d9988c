from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dripwatch.resources import DEFAULT_ALERT_SOUND, resource_path

DEFAULT_CONNECT_TIMEOUT_MS = 5000
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    log_file: Path


@dataclass(frozen=True)
class MonitorConfig:
    connect_timeout_ms: int
    alert_sound: Path
    alert_volume: float
    devices_override: str
    log_level: str

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None) -> MonitorConfig:
        """
        Read DRIPWATCH_* variables.

        Raises:
            ValueError naming the variable when a value cannot be used.
        """
        env = os.environ if environ is None else environ

        timeout_ms = _int_var(env, "DRIPWATCH_CONNECT_TIMEOUT_MS", DEFAULT_CONNECT_TIMEOUT_MS)
        if timeout_ms <= 0:
            raise ValueError(f"DRIPWATCH_CONNECT_TIMEOUT_MS must be positive, got {timeout_ms}")

        volume = _float_var(env, "DRIPWATCH_ALERT_VOLUME", 1.0)
        volume = max(0.0, min(1.0, volume))

        sound_raw = env.get("DRIPWATCH_ALERT_SOUND", "").strip()
        sound = Path(sound_raw) if sound_raw else resource_path(DEFAULT_ALERT_SOUND)

        level = env.get("DRIPWATCH_LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if level not in _LOG_LEVELS:
            raise ValueError(f"DRIPWATCH_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {level!r}")

        return MonitorConfig(
            connect_timeout_ms=timeout_ms,
            alert_sound=sound,
            alert_volume=volume,
            devices_override=env.get("DRIPWATCH_DEVICES", ""),
            log_level=level,
        )


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_var(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _portable_enabled() -> bool:
    raw = os.environ.get("DRIPWATCH_PORTABLE", "")
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _app_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def get_paths() -> AppPaths:
    if _portable_enabled():
        base = _app_root() / "DripwatchData"
    else:
        xdg = os.environ.get("XDG_STATE_HOME") or os.environ.get("APPDATA")
        if not xdg:
            xdg = str(Path.home() / ".local" / "state")
        base = Path(xdg) / "dripwatch"
    logs = base / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    return AppPaths(base_dir=base, logs_dir=logs, log_file=logs / "dripwatch.log")

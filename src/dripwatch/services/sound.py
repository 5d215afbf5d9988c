from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtMultimedia import QSoundEffect

logger = logging.getLogger("dripwatch.sound")

INFINITE_LOOP = QSoundEffect.Loop.Infinite.value


class AlertSound:
    """Looping alert cue backed by a single QSoundEffect."""

    def __init__(self, wav_path: Path, *, volume: float = 1.0) -> None:
        self._path = str(wav_path)
        self._volume = max(0.0, min(1.0, float(volume)))
        self._effect: QSoundEffect | None = None
        self._playing = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._effect is not None

    @property
    def playing(self) -> bool:
        return self._playing

    def acquire(self) -> bool:
        if self._effect is not None:
            return True
        if not self._path or not Path(self._path).is_file():
            logger.warning("alert sound missing file=%s", self._path)
            return False
        try:
            effect = QSoundEffect()
            effect.setSource(QUrl.fromLocalFile(self._path))
            effect.setLoopCount(INFINITE_LOOP)
            effect.setVolume(self._volume)
        except Exception:
            logger.exception("failed to load alert sound file=%s", self._path)
            return False
        self._effect = effect
        logger.info("alert sound loaded file=%s volume=%s", self._path, self._volume)
        return True

    def start(self) -> None:
        if self._effect is None or self._playing:
            return
        logger.info("alert sound play() file=%s", self._path)
        self._effect.play()
        self._playing = True

    def stop(self) -> None:
        # QSoundEffect.stop() rewinds, so the next play() starts at zero
        if self._effect is None or not self._playing:
            return
        logger.info("alert sound stop() file=%s", self._path)
        self._effect.stop()
        self._playing = False

    def release(self) -> None:
        effect = self._effect
        if effect is None:
            return
        self.stop()
        self._effect = None
        effect.deleteLater()
        logger.info("alert sound released file=%s", self._path)

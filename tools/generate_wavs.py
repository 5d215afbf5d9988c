from __future__ import annotations

import math
import wave
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SOUNDS = ROOT / "resources" / "sounds"


def write_alarm(
    path: Path,
    freqs_hz: tuple[float, ...],
    tone_s: float,
    gap_s: float,
    volume: float = 0.4,
    sample_rate: int = 44100,
) -> None:
    """Write a two-tone alarm pattern that loops without a click at the seam."""
    path.parent.mkdir(parents=True, exist_ok=True)

    frames = bytearray()
    for freq in freqs_hz:
        n = int(sample_rate * tone_s)
        for i in range(n):
            t = i / sample_rate
            env = 1.0
            attack = 0.01
            decay = 0.04
            if t < attack:
                env = t / attack
            elif t > tone_s - decay:
                env = max(0.0, (tone_s - t) / decay)
            s = math.sin(2.0 * math.pi * freq * t) * volume * env
            v = int(max(-1.0, min(1.0, s)) * 32767)
            frames += int(v).to_bytes(2, byteorder="little", signed=True)
        frames += bytes(2 * int(sample_rate * gap_s))

    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(sample_rate)
        wf.writeframes(frames)


def main() -> None:
    alert = SOUNDS / "alert.wav"

    if not alert.exists():
        write_alarm(alert, freqs_hz=(988.0, 784.0), tone_s=0.25, gap_s=0.15)
        print(f"generated: {alert}")
    else:
        print("sounds OK")


if __name__ == "__main__":
    main()

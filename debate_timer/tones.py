from __future__ import annotations

from typing import Dict

import numpy as np

# Fundamental frequency of each bell sound id, in Hz.
BELL_TONES: Dict[int, float] = {
    1: 1318.5,
    2: 880.0,
    3: 1760.0,
}


def synthesize_bell(
    frequency: float,
    times: int = 1,
    sample_rate: int = 24000,
    ring_seconds: float = 0.6,
    gap_seconds: float = 0.15,
    amplitude: float = 0.4,
) -> bytes:
    """Render ``times`` decaying bell strikes as 16-bit mono PCM."""
    ring_samples = int(ring_seconds * sample_rate)
    t = np.arange(ring_samples) / sample_rate
    envelope = np.exp(-6.0 * t)
    strike = np.sin(2 * np.pi * frequency * t) + 0.3 * np.sin(2 * np.pi * 2.76 * frequency * t)
    strike = amplitude * envelope * strike / 1.3
    gap = np.zeros(int(gap_seconds * sample_rate))
    pieces = []
    for i in range(max(0, times)):
        if i:
            pieces.append(gap)
        pieces.append(strike)
    if not pieces:
        return b""
    samples = np.concatenate(pieces)
    return (samples * 32767).astype(np.int16).tobytes()

from __future__ import annotations

import logging
from threading import Lock, Thread
from typing import Optional

import pyaudio

from .tones import BELL_TONES, synthesize_bell

logger = logging.getLogger(__name__)


class BellSoundPlayer:
    def __init__(self, sample_rate: int = 24000, pa: Optional[pyaudio.PyAudio] = None):
        self.sample_rate = sample_rate
        self.pa = pa or pyaudio.PyAudio()
        self._lock = Lock()
        self._thread: Optional[Thread] = None

    def play(self, sound_id: int, times: int = 1) -> None:
        frequency = BELL_TONES.get(sound_id)
        if frequency is None:
            logger.warning("Unknown bell sound %s, using the default bell", sound_id)
            frequency = BELL_TONES[1]
        audio = synthesize_bell(frequency, times=times, sample_rate=self.sample_rate)
        if not audio:
            return
        self._thread = Thread(target=self._play_bytes, args=(audio,), name="bell-sound", daemon=True)
        self._thread.start()

    def _play_bytes(self, audio: bytes) -> None:
        with self._lock:
            try:
                stream = self.pa.open(format=pyaudio.paInt16, channels=1, rate=self.sample_rate, output=True)
            except OSError:
                logger.error("Could not open audio output for bell", exc_info=True)
                return
            try:
                stream.write(audio)
            finally:
                stream.stop_stream()
                stream.close()

    def close(self) -> None:
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self.pa.terminate()

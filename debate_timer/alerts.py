from __future__ import annotations

import logging
from typing import Optional, Protocol

from .formats import DEFAULT_BELL_SOUND, BellInfo, PeriodInfo, format_seconds

logger = logging.getLogger(__name__)


class AlertListener(Protocol):
    def on_become_active(self, period: PeriodInfo) -> None: ...

    def on_become_inactive(self) -> None: ...

    def on_bell(self, bell: BellInfo, period: PeriodInfo) -> None: ...

    def on_overtime_bell(self, sound_id: int, repeat_count: int) -> None: ...


class BellPlayer(Protocol):
    def play(self, sound_id: int, times: int = 1) -> None: ...


class AlertManager:
    """Default alert listener: logs every event and rings bells through ``player``."""

    def __init__(self, player: Optional[BellPlayer] = None, silent_mode: bool = False):
        self.player = player
        self.silent_mode = silent_mode
        self.is_active = False
        self.current_period: Optional[PeriodInfo] = None

    def on_become_active(self, period: PeriodInfo) -> None:
        self.is_active = True
        self.current_period = period
        logger.info("Timer active (period=%s)", period.description)

    def on_become_inactive(self) -> None:
        self.is_active = False
        logger.info("Timer inactive")

    def on_bell(self, bell: BellInfo, period: PeriodInfo) -> None:
        self.current_period = period
        logger.info(
            "Bell at %s x%s (period=%s, pause=%s)",
            format_seconds(bell.time),
            bell.count,
            period.description,
            bell.pause_on_bell,
        )
        if bell.is_silent:
            return
        self._play(bell.sound_id, bell.count)

    def on_overtime_bell(self, sound_id: int, repeat_count: int) -> None:
        logger.info("Overtime bell x%s", repeat_count)
        self._play(sound_id, repeat_count)

    def play_bell(self) -> None:
        """Ring a single default bell on demand."""
        self._play(DEFAULT_BELL_SOUND, 1)

    def _play(self, sound_id: int, times: int) -> None:
        if self.silent_mode or self.player is None:
            return
        self.player.play(sound_id, times)

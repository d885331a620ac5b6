from __future__ import annotations

import logging

from .errors import TimerStateError
from .formats import DebateFormat, PeriodInfo, SpeechFormat
from .speech_manager import SpeechManager, TimerState

logger = logging.getLogger(__name__)

_SUFFIX_SPEECH_INDEX = ".csi"
_SUFFIX_SPEECH_MANAGER = ".sm"


class DebateManager:
    """Walks through the speeches of one debate format using a single :class:`SpeechManager`."""

    def __init__(self, debate_format: DebateFormat, speech_manager: SpeechManager):
        if len(debate_format) == 0:
            raise ValueError("Debate format has no speeches")
        self.debate_format = debate_format
        self.speech_manager = speech_manager
        self._index = 0
        self.speech_manager.load_speech(self.current_speech_format)

    @property
    def current_speech_index(self) -> int:
        return self._index

    @property
    def current_speech_name(self) -> str:
        return self.debate_format.get_speech(self._index).name

    @property
    def current_speech_format(self) -> SpeechFormat:
        return self.debate_format.get_speech(self._index).speech_format

    @property
    def current_period_info(self) -> PeriodInfo:
        return self.speech_manager.current_period_info

    @property
    def current_speech_time(self) -> int:
        return self.speech_manager.current_time

    @property
    def status(self) -> TimerState:
        return self.speech_manager.state

    @property
    def is_running(self) -> bool:
        return self.speech_manager.is_running

    def is_first_speaker(self) -> bool:
        return self._index == 0

    def is_last_speaker(self) -> bool:
        return self._index == len(self.debate_format) - 1

    def start_timer(self) -> None:
        self.speech_manager.start()

    def stop_timer(self) -> None:
        self.speech_manager.stop()

    def reset_speaker(self) -> None:
        self.speech_manager.reset()

    def next_speaker(self) -> None:
        if self.is_last_speaker():
            return
        self._go_to(self._index + 1)

    def previous_speaker(self) -> None:
        if self.is_first_speaker():
            return
        self._go_to(self._index - 1)

    def _go_to(self, index: int) -> None:
        if self.speech_manager.is_running:
            raise TimerStateError("Can't change speaker while the timer is running")
        self._index = index
        self.speech_manager.load_speech(self.current_speech_format)
        logger.info("Now on speech %s: %s", index + 1, self.current_speech_name)

    def save_state(self, key: str, bundle) -> None:
        bundle.put_int(key + _SUFFIX_SPEECH_INDEX, self._index)
        self.speech_manager.save_state(key + _SUFFIX_SPEECH_MANAGER, bundle)

    def restore_state(self, key: str, bundle) -> None:
        index = bundle.get_int(key + _SUFFIX_SPEECH_INDEX, 0)
        if not 0 <= index < len(self.debate_format):
            logger.warning("Saved speech index %s is out of range; starting from the first speech", index)
            index = 0
        self._index = index
        self.speech_manager.load_speech(self.current_speech_format)
        self.speech_manager.restore_state(key + _SUFFIX_SPEECH_MANAGER, bundle)

    def release(self) -> None:
        self.speech_manager.release()

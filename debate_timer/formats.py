from __future__ import annotations

import bisect
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional

DEFAULT_BELL_SOUND = 1
SILENT_BELL_SOUND = 0


class CountDirection(Enum):
    COUNT_UP = "up"
    COUNT_DOWN = "down"
    COUNT_USER = "user"


@dataclass
class PeriodInfo:
    description: Optional[str] = None
    background_color: Optional[int] = None

    def update(self, other: Optional["PeriodInfo"]) -> None:
        """Adopt the fields of ``other`` that are set; unset fields mean "stay"."""
        if other is None:
            return
        if other.description is not None:
            self.description = other.description
        if other.background_color is not None:
            self.background_color = other.background_color

    def copy(self) -> "PeriodInfo":
        return replace(self)

    def save_state(self, key: str, bundle) -> None:
        if self.description is not None:
            bundle.put_str(key + ".desc", self.description)
        if self.background_color is not None:
            bundle.put_int(key + ".bgcolor", self.background_color)

    def restore_state(self, key: str, bundle) -> None:
        self.description = bundle.get_str(key + ".desc")
        self.background_color = bundle.get_int(key + ".bgcolor")


@dataclass
class BellInfo:
    time: int
    count: int = 1
    sound: Optional[int] = None
    pause_on_bell: bool = False
    next_period_ref: Optional[str] = None
    next_period: Optional[PeriodInfo] = None

    @property
    def is_silent(self) -> bool:
        return self.sound == SILENT_BELL_SOUND

    @property
    def sound_id(self) -> int:
        return DEFAULT_BELL_SOUND if self.sound is None else self.sound

    def copy(self) -> "BellInfo":
        return replace(self)


@dataclass
class Resource:
    ref: str
    bells: List[BellInfo] = field(default_factory=list)
    periods: Dict[str, PeriodInfo] = field(default_factory=dict)


@dataclass
class SpeechFormat:
    ref: str
    length: int
    count_direction: CountDirection = CountDirection.COUNT_UP
    bells: List[BellInfo] = field(default_factory=list)
    periods: Dict[str, PeriodInfo] = field(default_factory=dict)
    first_period_ref: Optional[str] = None
    first_period: Optional[PeriodInfo] = None

    def add_bell(self, bell: BellInfo) -> None:
        # Bells at the same time keep their registration order.
        times = [b.time for b in self.bells]
        self.bells.insert(bisect.bisect_right(times, bell.time), bell)

    def get_bell_at_time(self, seconds: int) -> Optional[BellInfo]:
        for bell in self.bells:
            if bell.time == seconds:
                return bell
            if bell.time > seconds:
                break
        return None

    def get_first_bell_from_time(self, seconds: int) -> Optional[BellInfo]:
        for bell in self.bells:
            if bell.time >= seconds:
                return bell
        return None

    def get_period_info(self, ref: str) -> Optional[PeriodInfo]:
        return self.periods.get(ref)

    def get_first_period_info(self) -> PeriodInfo:
        if self.first_period is None:
            return PeriodInfo()
        return self.first_period.copy()

    def get_period_info_for_time(self, seconds: int) -> PeriodInfo:
        """Return the period that is displayed once every bell up to ``seconds`` has rung."""
        period = self.get_first_period_info()
        for bell in self.bells:
            if bell.time > seconds:
                break
            period.update(bell.next_period)
        return period


@dataclass
class Speech:
    name: str
    speech_format: SpeechFormat


@dataclass
class DebateFormat:
    name: Optional[str]
    speeches: List[Speech] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.speeches)

    def __iter__(self) -> Iterator[Speech]:
        return iter(self.speeches)

    def get_speech(self, index: int) -> Speech:
        return self.speeches[index]


def format_seconds(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"

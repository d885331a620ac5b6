from typing import List

import pytest

from debate_timer.builder import DebateFormatBuilder
from debate_timer.formats import BellInfo, PeriodInfo
from debate_timer.speech_manager import SpeechManager


class FakeTimer:
    """Stands in for TickTimer; ticks only when the test calls fire()."""

    instances: List["FakeTimer"] = []

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self, times: int = 1):
        for _ in range(times):
            if self.cancelled:
                return
            self.callback()


class RecordingAlerts:
    def __init__(self):
        self.events = []

    def on_become_active(self, period):
        self.events.append(("active", period.description))

    def on_become_inactive(self):
        self.events.append(("inactive",))

    def on_bell(self, bell, period):
        self.events.append(("bell", bell.time, period.description))

    def on_overtime_bell(self, sound_id, repeat_count):
        self.events.append(("overtime", sound_id, repeat_count))

    def names(self):
        return [event[0] for event in self.events]


@pytest.fixture(autouse=True)
def _clear_fake_timers():
    FakeTimer.instances = []
    yield
    FakeTimer.instances = []


@pytest.fixture
def alerts():
    return RecordingAlerts()


@pytest.fixture
def manager(alerts):
    return SpeechManager(alerts, timer_factory=FakeTimer)


def build_speech_format(length=60, bells=None, first_period="initial"):
    """Compile a one-speech debate and return its speech format."""
    builder = DebateFormatBuilder()
    builder.set_debate_format_name("fixture")
    builder.add_new_speech_format("sf", length)
    builder.add_period_info_to_speech_format("sf", "initial", PeriodInfo("Initial", 0x11111111))
    builder.add_period_info_to_speech_format("sf", "warning", PeriodInfo("Warning", 0x22222222))
    builder.add_period_info_to_speech_format("sf", "overtime", PeriodInfo("Overtime", None))
    if first_period:
        builder.set_first_period("sf", first_period)
    for bell, next_period in bells or []:
        builder.add_bell_info_to_speech_format("sf", bell, next_period)
    builder.add_speech("Only speech", "sf")
    return builder.build().get_speech(0).speech_format


@pytest.fixture
def speech_format():
    return build_speech_format(
        length=60,
        bells=[
            (BellInfo(time=30), "warning"),
            (BellInfo(time=60, count=2), "overtime"),
        ],
    )


@pytest.fixture
def make_speech_format():
    return build_speech_format

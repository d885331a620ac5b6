from __future__ import annotations

import logging
import time
from enum import Enum
from threading import Event, RLock, Thread, current_thread
from typing import Callable, List, Optional, Tuple

from .alerts import AlertListener
from .errors import TimerStateError
from .formats import DEFAULT_BELL_SOUND, BellInfo, PeriodInfo, SpeechFormat

logger = logging.getLogger(__name__)

OVERTIME_BELL_SOUND = DEFAULT_BELL_SOUND
OVERTIME_BELL_REPEATS = 3

_SUFFIX_TIME = ".t"
_SUFFIX_STATE = ".s"
_SUFFIX_PERIOD_INFO = ".cpi"


class TimerState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED_BY_USER = "stopped_by_user"
    STOPPED_BY_BELL = "stopped_by_bell"


class TickTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread, at a fixed rate."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = Thread(target=self._loop, name="speech-tick", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not current_thread():
            thread.join()
        self._thread = None

    def _loop(self) -> None:
        next_at = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, next_at - time.monotonic())):
            try:
                self.callback()
            except Exception:  # pragma: no cover - keep ticking
                logger.error("Tick callback failed", exc_info=True)
            next_at += self.interval


TimerFactory = Callable[[float, Callable[[], None]], TickTimer]
PeriodListener = Callable[[PeriodInfo], None]


class SpeechManager:
    """Keeps time for a single speech, rings its bells and tracks the displayed period.

    One instance is meant to live for a whole debate; :meth:`load_speech`
    switches it to another speech.  The displayed period is owned by this
    object; listeners and the alert listener always receive copies of it.
    """

    TICK_INTERVAL = 1.0

    def __init__(
        self,
        alert_listener: AlertListener,
        first_overtime_bell: int = 30,
        overtime_bell_period: int = 20,
        timer_factory: TimerFactory = TickTimer,
    ):
        self.alert_listener = alert_listener
        self.first_overtime_bell = first_overtime_bell
        self.overtime_bell_period = overtime_bell_period
        self._timer_factory = timer_factory

        self._lock = RLock()
        self._timer: Optional[TickTimer] = None
        self._speech_format: Optional[SpeechFormat] = None
        self._period = PeriodInfo()
        self._state = TimerState.NOT_STARTED
        self._current_time = 0
        self._period_listeners: List[PeriodListener] = []

    # ----- accessors -----

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def current_time(self) -> int:
        """Elapsed seconds, always counting up from zero."""
        return self._current_time

    @property
    def current_period_info(self) -> PeriodInfo:
        with self._lock:
            return self._period.copy()

    @property
    def speech_format(self) -> Optional[SpeechFormat]:
        return self._speech_format

    def add_period_listener(self, listener: PeriodListener) -> None:
        self._period_listeners.append(listener)

    def remove_period_listener(self, listener: PeriodListener) -> None:
        if listener in self._period_listeners:
            self._period_listeners.remove(listener)

    def set_overtime_bells(self, first_bell: int, period: int) -> None:
        """Ring the first overtime bell ``first_bell`` seconds after the finish, then every ``period`` seconds."""
        self.first_overtime_bell = first_bell
        self.overtime_bell_period = period

    # ----- control -----

    def load_speech(self, speech_format: SpeechFormat, seconds: int = 0) -> None:
        with self._lock:
            if self._state == TimerState.RUNNING:
                raise TimerStateError("Can't load a speech while the timer is running")
            self._speech_format = speech_format
            self._current_time = seconds
            if seconds == 0:
                self._period = speech_format.get_first_period_info()
                self._state = TimerState.NOT_STARTED
            else:
                self._period = speech_format.get_period_info_for_time(seconds)
                self._state = TimerState.STOPPED_BY_USER
            period = self._period.copy()
        logger.info("Loaded speech format '%s' at %s seconds", speech_format.ref, seconds)
        self._notify_period(period)

    def start(self) -> None:
        """Start ticking.  Does nothing if no speech is loaded or the timer is already running."""
        with self._lock:
            if self._speech_format is None or self._state == TimerState.RUNNING:
                return

            def tick() -> None:
                self._tick(timer)

            timer = self._timer_factory(self.TICK_INTERVAL, tick)
            self._timer = timer
            self._state = TimerState.RUNNING
            timer.start()
            period = self._period.copy()
        logger.info("Timer started at %s seconds", self._current_time)
        self._alert("on_become_active", period)

    def stop(self) -> None:
        with self._lock:
            timer = self._timer
            self._timer = None
            self._state = TimerState.STOPPED_BY_USER
        if timer is not None:
            timer.cancel()
        logger.info("Timer stopped at %s seconds", self._current_time)
        self._alert("on_become_inactive")

    def reset(self) -> None:
        self.stop()
        with self._lock:
            self._current_time = 0
            if self._speech_format is not None:
                self._period = self._speech_format.get_first_period_info()
            else:
                self._period = PeriodInfo()
            self._state = TimerState.NOT_STARTED
            period = self._period.copy()
        self._notify_period(period)

    def release(self) -> None:
        """Cancel the tick without notifying anyone, e.g. on shutdown."""
        with self._lock:
            timer = self._timer
            self._timer = None
            if self._state == TimerState.RUNNING:
                self._state = TimerState.STOPPED_BY_USER
        if timer is not None:
            timer.cancel()

    # ----- bells -----

    def get_next_bell_time(self) -> Optional[int]:
        """Return the time of the next bell, scheduled or overtime, or ``None`` if there is none."""
        speech_format = self._speech_format
        if speech_format is None:
            return None
        current = self._current_time
        next_bell = speech_format.get_first_bell_from_time(current)
        if next_bell is not None:
            return next_bell.time

        if self.first_overtime_bell == 0:
            return None

        length = speech_format.length
        overtime = current - length
        if overtime < self.first_overtime_bell:
            return length + self.first_overtime_bell

        if self.overtime_bell_period == 0:
            return None

        bell_time = self.first_overtime_bell + self.overtime_bell_period
        while overtime > bell_time:
            bell_time += self.overtime_bell_period
        return length + bell_time

    def is_overtime_bell_time(self, seconds: int) -> bool:
        speech_format = self._speech_format
        if speech_format is None:
            return False
        overtime = seconds - speech_format.length
        if overtime < self.first_overtime_bell:
            return False
        if self.first_overtime_bell <= 0:
            return False
        if overtime == self.first_overtime_bell:
            return True
        since_first = overtime - self.first_overtime_bell
        return self.overtime_bell_period > 0 and since_first % self.overtime_bell_period == 0

    def _tick(self, timer: TickTimer) -> None:
        bell_event: Optional[Tuple[BellInfo, PeriodInfo]] = None
        overtime = False
        with self._lock:
            if self._timer is not timer:
                return
            self._current_time += 1
            now = self._current_time
            bell = self._speech_format.get_bell_at_time(now)
            if bell is not None:
                logger.debug("Bell at %s", now)
                if bell.pause_on_bell:
                    self._pause()
                self._period.update(bell.next_period)
                bell_event = (bell, self._period.copy())
            if self.is_overtime_bell_time(now):
                logger.debug("Overtime bell at %s", now)
                overtime = True

        if bell_event is not None:
            self._notify_period(bell_event[1])
            self._alert("on_bell", bell_event[0], bell_event[1])
        if overtime:
            self._alert("on_overtime_bell", OVERTIME_BELL_SOUND, OVERTIME_BELL_REPEATS)

    def _pause(self) -> None:
        # Called with the lock held, on the tick thread.
        timer = self._timer
        self._timer = None
        self._state = TimerState.STOPPED_BY_BELL
        if timer is not None:
            timer.cancel()

    # ----- persistence -----

    def save_state(self, key: str, bundle) -> None:
        with self._lock:
            bundle.put_int(key + _SUFFIX_TIME, self._current_time)
            bundle.put_str(key + _SUFFIX_STATE, self._state.name)
            self._period.save_state(key + _SUFFIX_PERIOD_INFO, bundle)

    def restore_state(self, key: str, bundle) -> None:
        """Restore state saved by :meth:`save_state`; load the same speech first."""
        with self._lock:
            if self._state == TimerState.RUNNING:
                raise TimerStateError("Can't restore state while the timer is running")
            self._current_time = bundle.get_int(key + _SUFFIX_TIME, 0)
            fallback = TimerState.NOT_STARTED if self._current_time == 0 else TimerState.STOPPED_BY_USER
            state_name = bundle.get_str(key + _SUFFIX_STATE)
            state = TimerState.__members__.get(state_name, fallback) if state_name else fallback
            if state == TimerState.RUNNING:
                # The tick isn't resumed, so a running timer comes back stopped.
                state = TimerState.STOPPED_BY_USER
            self._state = state
            self._period.restore_state(key + _SUFFIX_PERIOD_INFO, bundle)
            period = self._period.copy()
        self._notify_period(period)

    # ----- notifications -----

    def _notify_period(self, period: PeriodInfo) -> None:
        for listener in list(self._period_listeners):
            try:
                listener(period.copy())
            except Exception:
                logger.error("Period listener failed", exc_info=True)

    def _alert(self, method: str, *args) -> None:
        try:
            getattr(self.alert_listener, method)(*args)
        except Exception:
            logger.error("Alert listener %s failed", method, exc_info=True)

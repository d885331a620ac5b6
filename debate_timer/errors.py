from __future__ import annotations

from typing import Optional


class DebateTimerError(Exception):
    """Base class for debate timer errors."""


class DebateFormatBuilderError(DebateTimerError):
    """Raised by the builder on duplicate or unknown references and bad call ordering."""


class DebateFormatNotValidError(DebateTimerError):
    def __init__(self, message: str, format_name: Optional[str] = None):
        super().__init__(message)
        self.format_name = format_name


class TimerStateError(DebateTimerError, RuntimeError):
    """Raised when the timer is asked to do something its current state forbids."""

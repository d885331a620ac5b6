"""Debating timer: debate format compiler and speech timing engine."""

from .builder import DebateFormatBuilder
from .debate_manager import DebateManager
from .errors import DebateFormatBuilderError, DebateFormatNotValidError, DebateTimerError, TimerStateError
from .formats import BellInfo, CountDirection, DebateFormat, PeriodInfo, Resource, Speech, SpeechFormat
from .speech_manager import SpeechManager, TimerState
from .storage import StateBundle
from .xml_loader import DebateFormatXmlLoader, load_debate_format
from .xml_strings import XmlStrings

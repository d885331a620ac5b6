from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from lxml import etree

from .builder import DebateFormatBuilder
from .errors import DebateFormatBuilderError, DebateFormatNotValidError
from .formats import SILENT_BELL_SOUND, BellInfo, CountDirection, DebateFormat, PeriodInfo
from .xml_strings import XmlStrings

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")
_COLOR = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})")


def parse_time_string(text: str, allow_hours: bool = False) -> int:
    """Convert ``S``, ``M:S`` (or ``H:M:S`` when ``allow_hours``) to seconds."""
    parts = [part.strip() for part in text.strip().split(":")]
    max_parts = 3 if allow_hours else 2
    if len(parts) > max_parts or not all(_DIGITS.fullmatch(part) for part in parts):
        raise ValueError(f"Invalid time string: {text!r}")
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def parse_color(text: str) -> int:
    match = _COLOR.fullmatch(text.strip())
    if not match:
        raise ValueError(f"Invalid colour: {text!r}")
    return int(match.group(1), 16)


@dataclass(frozen=True)
class _NoContext:
    def describe(self) -> str:
        return "no context"


@dataclass(frozen=True)
class _InResource:
    ref: str

    def describe(self) -> str:
        return f"resource '{self.ref}'"


@dataclass(frozen=True)
class _InSpeechFormat:
    ref: str
    first_period: Optional[str] = None

    def describe(self) -> str:
        return f"speech format '{self.ref}'"


@dataclass(frozen=True)
class _InSpeechesList:
    def describe(self) -> str:
        return "speeches list"


_Context = Union[_NoContext, _InResource, _InSpeechFormat, _InSpeechesList]
NO_CONTEXT = _NoContext()


class DebateFormatXmlLoader:
    """Builds a :class:`DebateFormat` from a debate format XML document.

    The document is read as a stream of element start/end events.  Problems
    with individual elements are collected in :attr:`errors` and only the
    offending element is skipped; the rest of the document is still read.
    """

    def __init__(self, strings: Optional[XmlStrings] = None, builder: Optional[DebateFormatBuilder] = None):
        self.strings = strings or XmlStrings()
        # an injected builder is used for the next document only
        self._next_builder = builder
        self._builder = DebateFormatBuilder()
        self._errors: List[str] = []
        self._context: _Context = NO_CONTEXT
        self._in_root = False

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def build_from_file(self, path: Union[str, Path]) -> DebateFormat:
        with open(path, "rb") as f:
            return self.build_from_stream(f)

    def build_from_string(self, text: Union[str, bytes]) -> DebateFormat:
        if isinstance(text, str):
            text = text.encode("utf-8")
        return self.build_from_stream(io.BytesIO(text))

    def build_from_stream(self, stream: BinaryIO) -> DebateFormat:
        self._builder = self._next_builder or DebateFormatBuilder()
        self._next_builder = None
        self._errors = []
        self._context = NO_CONTEXT
        self._in_root = False

        events = etree.iterparse(
            stream,
            events=("start", "end"),
            resolve_entities=False,
            no_network=True,
        )
        try:
            for event, elem in events:
                if not isinstance(elem.tag, str):
                    continue
                if event == "start":
                    self._start_element(elem)
                else:
                    self._end_element(elem)
                    elem.clear()
        except etree.XMLSyntaxError as exc:
            logger.error("Debate format XML is not well-formed: %s", exc)
            raise DebateFormatNotValidError(
                f"The debate format XML is not well-formed: {exc}", self._builder.debate_format_name
            ) from exc

        debate_format = self._builder.build()
        self._errors.extend(self._builder.errors)
        return debate_format

    # ----- event handlers -----

    def _end_element(self, elem) -> None:
        qname = etree.QName(elem)
        s = self.strings
        if qname.namespace != s.uri:
            return
        name = qname.localname

        if name == s.elem_root:
            self._in_root = False
            return

        # Only the element that opened the current context may close it; a
        # rejected element never opened one.
        context = self._context
        if name == s.elem_resource:
            closes = isinstance(context, _InResource)
        elif name == s.elem_speech_format:
            closes = isinstance(context, _InSpeechFormat)
            if closes and context.first_period is not None:
                try:
                    self._builder.set_first_period(context.ref, context.first_period)
                except DebateFormatBuilderError as exc:
                    self._log_error(str(exc))
        elif name == s.elem_speeches_list:
            closes = isinstance(context, _InSpeechesList)
        else:
            return

        if closes:
            self._context = NO_CONTEXT
        else:
            logger.debug("End of <%s> does not close %s; context kept", name, context.describe())

    def _start_element(self, elem) -> None:
        qname = etree.QName(elem)
        s = self.strings
        if qname.namespace != s.uri:
            self._log_error(f"Element <{elem.tag}> is not in the debate format namespace; ignored")
            return
        name = qname.localname

        if name == s.elem_root:
            self._start_root(elem)
            return

        if not self._in_root:
            self._log_error(f"Element <{name}> is outside the <{s.elem_root}> element; ignored")
            return

        handlers = {
            s.elem_resource: self._start_resource,
            s.elem_speech_format: self._start_speech_format,
            s.elem_bell: self._start_bell,
            s.elem_period: self._start_period,
            s.elem_include: self._start_include,
            s.elem_speeches_list: self._start_speeches_list,
            s.elem_speech: self._start_speech,
        }
        handler = handlers.get(name)
        if handler is None:
            logger.debug("Ignoring unknown element <%s>", name)
            return
        handler(elem)

    def _start_root(self, elem) -> None:
        name = self._get_value(elem, self.strings.attr_root_name)
        if name is None:
            self._log_error(f"The <{self.strings.elem_root}> element has no name")
            return
        self._builder.set_debate_format_name(name)
        self._in_root = True

    def _start_resource(self, elem) -> None:
        s = self.strings
        ref = self._get_value(elem, s.attr_ref)
        if ref is None:
            self._log_error("A resource has no reference")
            return
        if not self._assert_no_context_or_reset(f"resource '{ref}'"):
            return
        try:
            self._builder.add_new_resource(ref)
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))
            return
        self._context = _InResource(ref)

    def _start_speech_format(self, elem) -> None:
        s = self.strings
        ref = self._get_value(elem, s.attr_ref)
        if ref is None:
            self._log_error("A speech format has no reference")
            return
        if not self._assert_no_context_or_reset(f"speech format '{ref}'"):
            return

        length_str = self._get_value(elem, s.attr_speech_format_length)
        if length_str is None:
            self._log_error(f"Speech format '{ref}' has no length")
            return
        try:
            length = parse_time_string(length_str, allow_hours=True)
        except ValueError:
            self._log_error(f"Speech format '{ref}' has an invalid length: {length_str}")
            return

        try:
            self._builder.add_new_speech_format(ref, length)
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))
            return

        first_period = self._get_value(elem, s.attr_speech_format_first_period)
        self._context = _InSpeechFormat(ref, first_period)

        count_dir = self._get_value(elem, s.attr_speech_format_count_dir)
        if count_dir is not None:
            direction = self._parse_count_direction(count_dir)
            if direction is None:
                self._log_error(f"Speech format '{ref}' has an invalid count direction: {count_dir}")
            else:
                self._builder.set_count_direction(ref, direction)

    def _start_bell(self, elem) -> None:
        s = self.strings
        where = self._context.describe()

        time_str = self._get_value(elem, s.attr_bell_time)
        if time_str is None:
            self._log_error(f"A bell in {where} has no time")
            return
        at_finish = _equals_ignore_case(time_str, s.value_bell_time_finish)
        time = 0
        if not at_finish:
            try:
                time = parse_time_string(time_str)
            except ValueError:
                self._log_error(f"A bell in {where} has an invalid time: {time_str}")
                return

        bell = BellInfo(time=time)

        number_str = self._get_value(elem, s.attr_bell_number)
        if number_str is not None:
            try:
                bell.count = int(number_str)
            except ValueError:
                self._log_error(f"The bell at {time_str} in {where} has an invalid number: {number_str}")

        next_period = self._get_value(elem, s.attr_bell_next_period)
        if next_period is not None and _equals_ignore_case(next_period, s.value_stay):
            next_period = None

        sound = self._get_value(elem, s.attr_bell_sound)
        if sound is not None:
            if _equals_ignore_case(sound, s.value_silent):
                bell.sound = SILENT_BELL_SOUND
            elif not (_equals_ignore_case(sound, s.value_stay) or _equals_ignore_case(sound, s.value_default)):
                self._log_error(f"The bell at {time_str} in {where} has an invalid sound: {sound}")

        pause_str = self._get_value(elem, s.attr_bell_pause_on_bell)
        if pause_str is not None:
            if _equals_ignore_case(pause_str, s.value_true):
                bell.pause_on_bell = True
            elif _equals_ignore_case(pause_str, s.value_false):
                bell.pause_on_bell = False
            elif not _equals_ignore_case(pause_str, s.value_stay):
                self._log_error(f"The bell at {time_str} in {where} has an invalid pause-on-bell value: {pause_str}")

        context = self._context
        try:
            if isinstance(context, _InResource):
                if at_finish:
                    self._log_error(f"A bell in {where} uses '{time_str}', which is only allowed in speech formats")
                    return
                self._builder.add_bell_info_to_resource(context.ref, bell, next_period)
            elif isinstance(context, _InSpeechFormat):
                if at_finish:
                    self._builder.add_bell_info_to_speech_format_at_finish(context.ref, bell, next_period)
                else:
                    self._builder.add_bell_info_to_speech_format(context.ref, bell, next_period)
            else:
                self._log_error(f"A bell at {time_str} is outside a resource or speech format; ignored")
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))

    def _start_period(self, elem) -> None:
        s = self.strings
        ref = self._get_value(elem, s.attr_ref)
        if ref is None:
            self._log_error(f"A period in {self._context.describe()} has no reference")
            return

        description = self._get_value(elem, s.attr_period_desc)
        if description is not None and _equals_ignore_case(description, s.value_stay):
            description = None

        color = None
        color_str = self._get_value(elem, s.attr_period_bgcolor)
        if color_str is not None and not _equals_ignore_case(color_str, s.value_stay):
            try:
                color = parse_color(color_str)
            except ValueError:
                self._log_error(f"Period '{ref}' has an invalid background colour: {color_str}")

        info = PeriodInfo(description=description, background_color=color)

        context = self._context
        try:
            if isinstance(context, _InResource):
                self._builder.add_period_info_to_resource(context.ref, ref, info)
            elif isinstance(context, _InSpeechFormat):
                self._builder.add_period_info_to_speech_format(context.ref, ref, info)
            else:
                self._log_error(f"Period '{ref}' is outside a resource or speech format; ignored")
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))

    def _start_include(self, elem) -> None:
        resource_ref = self._get_value(elem, self.strings.attr_include_resource)
        if resource_ref is None:
            self._log_error(f"An include in {self._context.describe()} has no resource")
            return
        context = self._context
        if not isinstance(context, _InSpeechFormat):
            self._log_error(f"Include of resource '{resource_ref}' is outside a speech format; ignored")
            return
        try:
            self._builder.include_resource(context.ref, resource_ref)
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))

    def _start_speeches_list(self, elem) -> None:
        if not self._assert_no_context_or_reset("the speeches list"):
            return
        self._context = _InSpeechesList()

    def _start_speech(self, elem) -> None:
        s = self.strings
        name = self._get_value(elem, s.attr_speech_name)
        if name is None:
            self._log_error("A speech has no name")
            return
        speech_format = self._get_value(elem, s.attr_speech_format)
        if speech_format is None:
            self._log_error(f"Speech '{name}' has no speech format")
            return
        if not isinstance(self._context, _InSpeechesList):
            self._log_error(f"Speech '{name}' is outside the speeches list; ignored")
            return
        try:
            self._builder.add_speech(name, speech_format)
        except DebateFormatBuilderError as exc:
            self._log_error(str(exc))

    # ----- helpers -----

    def _assert_no_context_or_reset(self, what: str) -> bool:
        if isinstance(self._context, _NoContext):
            return True
        self._log_error(f"Found {what} inside {self._context.describe()}; ignored, context reset")
        self._context = NO_CONTEXT
        return False

    def _parse_count_direction(self, value: str) -> Optional[CountDirection]:
        s = self.strings
        if _equals_ignore_case(value, s.value_count_dir_up):
            return CountDirection.COUNT_UP
        if _equals_ignore_case(value, s.value_count_dir_down):
            return CountDirection.COUNT_DOWN
        if _equals_ignore_case(value, s.value_count_dir_user):
            return CountDirection.COUNT_USER
        return None

    def _get_value(self, elem, name: str) -> Optional[str]:
        value = elem.get(f"{{{self.strings.uri}}}{name}")
        if value is None:
            value = elem.get(name)
        return value

    def _log_error(self, message: str) -> None:
        logger.error("XML error: %s", message)
        self._errors.append(message)


def _equals_ignore_case(value: str, expected: str) -> bool:
    return value.casefold() == expected.casefold()


def load_debate_format(path: Union[str, Path], strings: Optional[XmlStrings] = None):
    """Build the debate format in ``path``; returns ``(debate_format, errors)``."""
    loader = DebateFormatXmlLoader(strings)
    debate_format = loader.build_from_file(path)
    return debate_format, loader.errors

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .errors import DebateFormatBuilderError, DebateFormatNotValidError
from .formats import (
    BellInfo,
    CountDirection,
    DebateFormat,
    PeriodInfo,
    Resource,
    Speech,
    SpeechFormat,
)

logger = logging.getLogger(__name__)


class DebateFormatBuilder:
    """Assembles a :class:`DebateFormat` from resources, speech formats and speeches.

    References are checked as they are registered where possible.  Period
    references on bells and first periods can only be checked once every
    period is known, so they are resolved in :meth:`build`; the ones that do
    not resolve are recorded in :attr:`errors` and skipped.
    """

    def __init__(self) -> None:
        self._name: Optional[str] = None
        self._resources: Dict[str, Resource] = {}
        self._speech_formats: Dict[str, SpeechFormat] = {}
        self._finish_bells: List[Tuple[str, BellInfo]] = []
        self._speeches: List[Tuple[str, str]] = []
        self._built = False
        self.errors: List[str] = []

    @property
    def debate_format_name(self) -> Optional[str]:
        return self._name

    def set_debate_format_name(self, name: str) -> None:
        self._check_not_built()
        self._name = name

    def add_new_resource(self, ref: str) -> None:
        self._check_not_built()
        if ref in self._resources:
            raise DebateFormatBuilderError(f"A resource with reference '{ref}' already exists")
        self._resources[ref] = Resource(ref=ref)

    def add_new_speech_format(self, ref: str, length: int) -> None:
        self._check_not_built()
        if ref in self._speech_formats:
            raise DebateFormatBuilderError(f"A speech format with reference '{ref}' already exists")
        if length < 0:
            raise DebateFormatBuilderError(f"Speech format '{ref}' has a negative length ({length})")
        self._speech_formats[ref] = SpeechFormat(ref=ref, length=length)

    def set_count_direction(self, speech_ref: str, direction: CountDirection) -> None:
        self._check_not_built()
        self._get_speech_format(speech_ref).count_direction = direction

    def set_first_period(self, speech_ref: str, period_ref: Optional[str]) -> None:
        self._check_not_built()
        self._get_speech_format(speech_ref).first_period_ref = period_ref

    def add_period_info_to_resource(self, resource_ref: str, period_ref: str, info: PeriodInfo) -> None:
        self._check_not_built()
        resource = self._get_resource(resource_ref)
        _add_period(resource.periods, f"resource '{resource_ref}'", period_ref, info)

    def add_period_info_to_speech_format(self, speech_ref: str, period_ref: str, info: PeriodInfo) -> None:
        self._check_not_built()
        speech_format = self._get_speech_format(speech_ref)
        _add_period(speech_format.periods, f"speech format '{speech_ref}'", period_ref, info)

    def add_bell_info_to_resource(
        self, resource_ref: str, bell: BellInfo, next_period_ref: Optional[str] = None
    ) -> None:
        self._check_not_built()
        resource = self._get_resource(resource_ref)
        resource.bells.append(_prepare_bell(bell, next_period_ref))

    def add_bell_info_to_speech_format(
        self, speech_ref: str, bell: BellInfo, next_period_ref: Optional[str] = None
    ) -> None:
        self._check_not_built()
        speech_format = self._get_speech_format(speech_ref)
        speech_format.add_bell(_prepare_bell(bell, next_period_ref))

    def add_bell_info_to_speech_format_at_finish(
        self, speech_ref: str, bell: BellInfo, next_period_ref: Optional[str] = None
    ) -> None:
        self._check_not_built()
        self._get_speech_format(speech_ref)
        # Time is filled in from the speech length at build().
        prepared = _prepare_bell(bell, next_period_ref, check_time=False)
        self._finish_bells.append((speech_ref, prepared))

    def include_resource(self, speech_ref: str, resource_ref: str) -> None:
        self._check_not_built()
        speech_format = self._get_speech_format(speech_ref)
        resource = self._get_resource(resource_ref)
        for period_ref, info in resource.periods.items():
            if period_ref in speech_format.periods:
                logger.warning(
                    "Period '%s' from resource '%s' is already defined in speech format '%s'; keeping the existing one",
                    period_ref,
                    resource_ref,
                    speech_ref,
                )
                continue
            speech_format.periods[period_ref] = info.copy()
        for bell in resource.bells:
            speech_format.add_bell(bell.copy())

    def add_speech(self, name: str, speech_ref: str) -> None:
        self._check_not_built()
        if speech_ref not in self._speech_formats:
            raise DebateFormatBuilderError(
                f"Speech '{name}' refers to speech format '{speech_ref}', which does not exist"
            )
        self._speeches.append((name, speech_ref))

    def build(self) -> DebateFormat:
        if not self._speeches:
            raise DebateFormatNotValidError("There are no speeches in this format", self._name)
        if not self._built:
            for speech_ref, bell in self._finish_bells:
                speech_format = self._speech_formats[speech_ref]
                bell.time = speech_format.length
                speech_format.add_bell(bell)
            self._finish_bells = []
            for speech_format in self._speech_formats.values():
                self._resolve_speech_format(speech_format)
            self._built = True
        speeches = [Speech(name=name, speech_format=self._speech_formats[ref]) for name, ref in self._speeches]
        logger.info("Built debate format '%s' with %s speeches", self._name, len(speeches))
        return DebateFormat(name=self._name, speeches=speeches)

    def _resolve_speech_format(self, speech_format: SpeechFormat) -> None:
        resolved: List[BellInfo] = []
        for bell in speech_format.bells:
            if bell.next_period_ref is not None:
                period = speech_format.get_period_info(bell.next_period_ref)
                if period is None:
                    self._record_error(
                        f"Bell at {bell.time} seconds in speech format '{speech_format.ref}' refers to "
                        f"period '{bell.next_period_ref}', which does not exist; bell ignored"
                    )
                    continue
                bell.next_period = period
            resolved.append(bell)
        speech_format.bells = resolved

        if speech_format.first_period_ref is not None:
            first = speech_format.get_period_info(speech_format.first_period_ref)
            if first is None:
                self._record_error(
                    f"First period '{speech_format.first_period_ref}' of speech format "
                    f"'{speech_format.ref}' does not exist"
                )
            speech_format.first_period = first

    def _record_error(self, message: str) -> None:
        logger.error(message)
        self.errors.append(message)

    def _get_resource(self, ref: str) -> Resource:
        resource = self._resources.get(ref)
        if resource is None:
            raise DebateFormatBuilderError(f"Resource '{ref}' does not exist")
        return resource

    def _get_speech_format(self, ref: str) -> SpeechFormat:
        speech_format = self._speech_formats.get(ref)
        if speech_format is None:
            raise DebateFormatBuilderError(f"Speech format '{ref}' does not exist")
        return speech_format

    def _check_not_built(self) -> None:
        if self._built:
            raise DebateFormatBuilderError("Cannot modify a debate format after it has been built")


def _add_period(periods: Dict[str, PeriodInfo], scope: str, period_ref: str, info: PeriodInfo) -> None:
    if period_ref in periods:
        raise DebateFormatBuilderError(f"Period '{period_ref}' already exists in {scope}")
    periods[period_ref] = info.copy()


def _prepare_bell(bell: BellInfo, next_period_ref: Optional[str], check_time: bool = True) -> BellInfo:
    if check_time and bell.time < 0:
        raise DebateFormatBuilderError(f"Bell time cannot be negative ({bell.time})")
    prepared = bell.copy()
    prepared.next_period_ref = next_period_ref
    prepared.next_period = None
    return prepared

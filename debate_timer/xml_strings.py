from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_XML_URI = "urn:debatingtimer:debateformat"


@dataclass(frozen=True)
class XmlStrings:
    """Element names, attribute names and sentinel values of the debate format XML."""

    uri: str = DEFAULT_XML_URI

    elem_root: str = "debateformat"
    elem_resource: str = "resource"
    elem_speech_format: str = "speechtype"
    elem_bell: str = "bell"
    elem_period: str = "period"
    elem_include: str = "include"
    elem_speeches_list: str = "speeches"
    elem_speech: str = "speech"

    attr_root_name: str = "name"
    attr_ref: str = "ref"
    attr_speech_format_length: str = "length"
    attr_speech_format_count_dir: str = "countdir"
    attr_speech_format_first_period: str = "firstperiod"
    attr_bell_time: str = "time"
    attr_bell_number: str = "number"
    attr_bell_next_period: str = "nextperiod"
    attr_bell_sound: str = "sound"
    attr_bell_pause_on_bell: str = "pauseonbell"
    attr_period_desc: str = "desc"
    attr_period_bgcolor: str = "bgcolor"
    attr_include_resource: str = "resource"
    attr_speech_name: str = "name"
    attr_speech_format: str = "type"

    value_stay: str = "#stay"
    value_default: str = "#default"
    value_silent: str = "#silent"
    value_true: str = "true"
    value_false: str = "false"
    value_bell_time_finish: str = "finish"
    value_count_dir_up: str = "up"
    value_count_dir_down: str = "down"
    value_count_dir_user: str = "user"


def load_xml_strings(path: Optional[Path]) -> XmlStrings:
    """Return the default strings, overridden by any keys found in the JSON file at ``path``."""
    defaults = XmlStrings()
    if path is None:
        return defaults
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"XML strings file {path} must contain a JSON object")
    known = {f.name for f in fields(XmlStrings)}
    overrides = {}
    for key, value in payload.items():
        if key not in known:
            logger.warning("Ignoring unknown XML string key %s in %s", key, path)
            continue
        if not isinstance(value, str):
            raise ValueError(f"XML string {key} in {path} must be a string")
        overrides[key] = value
    return replace(defaults, **overrides)

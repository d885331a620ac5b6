from __future__ import annotations

from typing import Dict, List, Tuple

from .builder import DebateFormatBuilder
from .formats import BellInfo, DebateFormat, PeriodInfo

# name -> ((substantive length, [(bell time, count, next period)]), (reply length, [...]))
_BellPlan = List[Tuple[int, int, str]]
PRESETS: Dict[str, Tuple[Tuple[int, _BellPlan], Tuple[int, _BellPlan]]] = {
    "test": (
        (20, [(5, 1, "pois-allowed"), (15, 1, "warning"), (20, 2, "overtime")]),
        (10, [(5, 1, "warning"), (10, 2, "overtime")]),
    ),
    "australs": (
        (8 * 60, [(60, 1, "pois-allowed"), (7 * 60, 1, "warning"), (8 * 60, 2, "overtime")]),
        (4 * 60, [(3 * 60, 1, "warning"), (4 * 60, 2, "overtime")]),
    ),
    "premier-b": (
        (6 * 60, [(60, 1, "pois-allowed"), (5 * 60, 1, "warning"), (6 * 60, 2, "overtime")]),
        (3 * 60, [(2 * 60, 1, "warning"), (3 * 60, 2, "overtime")]),
    ),
    "thropy": (
        (8 * 60, [(6 * 60, 1, "warning"), (8 * 60, 2, "overtime")]),
        (4 * 60, [(3 * 60, 1, "warning"), (4 * 60, 2, "overtime")]),
    ),
    "short-australs": (
        (6 * 60, [(4 * 60, 1, "warning"), (6 * 60, 2, "overtime")]),
        (3 * 60, [(2 * 60, 1, "warning"), (3 * 60, 2, "overtime")]),
    ),
}

SPEECHES = [
    ("1st Affirmative", "substantive"),
    ("1st Negative", "substantive"),
    ("2nd Affirmative", "substantive"),
    ("2nd Negative", "substantive"),
    ("3rd Affirmative", "substantive"),
    ("3rd Negative", "substantive"),
    ("Negative Leader's Reply", "reply"),
    ("Affirmative Leader's Reply", "reply"),
]


def build_default_debate(mode: str = "test") -> DebateFormat:
    if mode not in PRESETS:
        raise ValueError(f"Unknown preset {mode!r}; choose from {', '.join(sorted(PRESETS))}")
    builder = DebateFormatBuilder()
    builder.set_debate_format_name(mode)

    builder.add_new_resource("#all")
    builder.add_period_info_to_resource("#all", "initial", PeriodInfo("Initial", None))
    builder.add_period_info_to_resource("#all", "pois-allowed", PeriodInfo("POIs allowed", 0x7700FF00))
    builder.add_period_info_to_resource("#all", "warning", PeriodInfo("Warning bell rung", 0x77FFCC00))
    builder.add_period_info_to_resource("#all", "overtime", PeriodInfo("Overtime", 0x77FF0000))

    substantive, reply = PRESETS[mode]
    for ref, (length, bells) in (("substantive", substantive), ("reply", reply)):
        builder.add_new_speech_format(ref, length)
        builder.include_resource(ref, "#all")
        builder.set_first_period(ref, "initial")
        for bell_time, count, next_period in bells:
            builder.add_bell_info_to_speech_format(ref, BellInfo(time=bell_time, count=count), next_period)

    for name, ref in SPEECHES:
        builder.add_speech(name, ref)
    return builder.build()

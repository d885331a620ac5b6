import pytest

from debate_timer.builder import DebateFormatBuilder
from debate_timer.errors import DebateFormatBuilderError, DebateFormatNotValidError
from debate_timer.formats import BellInfo, CountDirection, PeriodInfo


def _builder_with_speech_format(length=300):
    builder = DebateFormatBuilder()
    builder.set_debate_format_name("Test format")
    builder.add_new_speech_format("sf", length)
    return builder


def test_build_without_speeches_fails_with_name():
    builder = _builder_with_speech_format()
    with pytest.raises(DebateFormatNotValidError) as excinfo:
        builder.build()
    assert excinfo.value.format_name == "Test format"


def test_duplicate_references_rejected():
    builder = _builder_with_speech_format()
    with pytest.raises(DebateFormatBuilderError):
        builder.add_new_speech_format("sf", 60)
    builder.add_new_resource("res")
    with pytest.raises(DebateFormatBuilderError):
        builder.add_new_resource("res")
    builder.add_period_info_to_resource("res", "p", PeriodInfo("P"))
    with pytest.raises(DebateFormatBuilderError):
        builder.add_period_info_to_resource("res", "p", PeriodInfo("Q"))


def test_unknown_references_rejected():
    builder = _builder_with_speech_format()
    with pytest.raises(DebateFormatBuilderError):
        builder.add_bell_info_to_speech_format("missing", BellInfo(time=10))
    with pytest.raises(DebateFormatBuilderError):
        builder.include_resource("sf", "missing")
    with pytest.raises(DebateFormatBuilderError):
        builder.add_speech("1st", "missing")
    with pytest.raises(DebateFormatBuilderError):
        builder.add_period_info_to_resource("missing", "p", PeriodInfo())


def test_negative_values_rejected():
    builder = _builder_with_speech_format()
    with pytest.raises(DebateFormatBuilderError):
        builder.add_new_speech_format("bad", -1)
    with pytest.raises(DebateFormatBuilderError):
        builder.add_bell_info_to_speech_format("sf", BellInfo(time=-5))


def test_bell_at_finish_takes_speech_length():
    builder = _builder_with_speech_format(300)
    builder.add_bell_info_to_speech_format_at_finish("sf", BellInfo(time=0, count=2))
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert [bell.time for bell in speech_format.bells] == [300]
    assert speech_format.get_bell_at_time(300).count == 2


def test_bells_sorted_by_time():
    builder = _builder_with_speech_format()
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=240))
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=60))
    builder.add_bell_info_to_speech_format_at_finish("sf", BellInfo(time=0))
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=120))
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert [bell.time for bell in speech_format.bells] == [60, 120, 240, 300]
    assert speech_format.get_first_bell_from_time(61).time == 120
    assert speech_format.get_first_bell_from_time(120).time == 120
    assert speech_format.get_first_bell_from_time(301) is None
    assert speech_format.get_bell_at_time(100) is None


def test_include_resource_copies_bells_and_periods():
    builder = _builder_with_speech_format()
    builder.add_new_resource("common")
    builder.add_period_info_to_resource("common", "warning", PeriodInfo("Warning", 0x77FFCC00))
    builder.add_bell_info_to_resource("common", BellInfo(time=240), "warning")
    builder.include_resource("sf", "common")
    builder.include_resource("sf", "common")
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert [bell.time for bell in speech_format.bells] == [240, 240]
    assert speech_format.get_period_info("warning").description == "Warning"
    assert speech_format.bells[0].next_period is speech_format.get_period_info("warning")
    assert speech_format.bells[0] is not speech_format.bells[1]


def test_included_period_does_not_replace_existing():
    builder = _builder_with_speech_format()
    builder.add_period_info_to_speech_format("sf", "warning", PeriodInfo("Own warning"))
    builder.add_new_resource("common")
    builder.add_period_info_to_resource("common", "warning", PeriodInfo("Shared warning"))
    builder.include_resource("sf", "common")
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert speech_format.get_period_info("warning").description == "Own warning"


def test_unresolved_next_period_drops_bell():
    builder = _builder_with_speech_format()
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=60), "nowhere")
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=120))
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert [bell.time for bell in speech_format.bells] == [120]
    assert len(builder.errors) == 1
    assert "nowhere" in builder.errors[0]


def test_first_period_resolved_at_build():
    builder = _builder_with_speech_format()
    builder.set_first_period("sf", "intro")
    builder.add_period_info_to_speech_format("sf", "intro", PeriodInfo("Intro", 0x10203040))
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    first = speech_format.get_first_period_info()
    assert first == PeriodInfo("Intro", 0x10203040)
    assert first is not speech_format.get_period_info("intro")


def test_unknown_first_period_is_recorded():
    builder = _builder_with_speech_format()
    builder.set_first_period("sf", "ghost")
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert speech_format.get_first_period_info() == PeriodInfo()
    assert any("ghost" in error for error in builder.errors)


def test_count_direction_and_speeches():
    builder = _builder_with_speech_format()
    builder.set_count_direction("sf", CountDirection.COUNT_DOWN)
    builder.add_speech("1st Affirmative", "sf")
    builder.add_speech("1st Negative", "sf")
    debate_format = builder.build()
    assert debate_format.name == "Test format"
    assert [speech.name for speech in debate_format] == ["1st Affirmative", "1st Negative"]
    assert debate_format.get_speech(1).speech_format.count_direction == CountDirection.COUNT_DOWN


def test_no_changes_after_build():
    builder = _builder_with_speech_format()
    builder.add_speech("1st", "sf")
    builder.build()
    with pytest.raises(DebateFormatBuilderError):
        builder.add_speech("2nd", "sf")


def test_registered_bell_is_a_copy():
    builder = _builder_with_speech_format()
    bell = BellInfo(time=30)
    builder.add_bell_info_to_speech_format("sf", bell, None)
    bell.time = 45
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert speech_format.bells[0].time == 30


def test_period_for_time_follows_bells():
    builder = _builder_with_speech_format()
    builder.add_period_info_to_speech_format("sf", "a", PeriodInfo("A", 1))
    builder.add_period_info_to_speech_format("sf", "b", PeriodInfo(None, 2))
    builder.set_first_period("sf", "a")
    builder.add_bell_info_to_speech_format("sf", BellInfo(time=60), "b")
    builder.add_speech("1st", "sf")
    speech_format = builder.build().get_speech(0).speech_format
    assert speech_format.get_period_info_for_time(59) == PeriodInfo("A", 1)
    assert speech_format.get_period_info_for_time(60) == PeriodInfo("A", 2)

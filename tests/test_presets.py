import pytest

from debate_timer.presets import PRESETS, build_default_debate


@pytest.mark.parametrize("mode", sorted(PRESETS))
def test_presets_compile(mode):
    debate_format = build_default_debate(mode)
    assert debate_format.name == mode
    assert len(debate_format) == 8
    for speech in debate_format:
        speech_format = speech.speech_format
        assert speech_format.get_first_period_info().description == "Initial"
        last_bell = speech_format.bells[-1]
        assert last_bell.time == speech_format.length
        assert last_bell.count == 2
        assert last_bell.next_period.description == "Overtime"


def test_australs_lengths():
    debate_format = build_default_debate("australs")
    assert debate_format.get_speech(0).speech_format.length == 480
    assert debate_format.get_speech(7).speech_format.length == 240


def test_unknown_preset():
    with pytest.raises(ValueError):
        build_default_debate("parliamentary")

from argparse import Namespace

import pytest

from debate_timer.alerts import AlertManager
from debate_timer.cli import build_parser, cmd_check, describe_status, handle_command
from debate_timer.config import Config
from debate_timer.debate_manager import DebateManager
from debate_timer.presets import build_default_debate
from debate_timer.speech_manager import SpeechManager, TimerState

from conftest import FakeTimer

VALID = """<debateformat xmlns="urn:debatingtimer:debateformat" name="Tiny">
  <speechtype ref="sf" length="1:30"><bell time="1:00"/><bell time="finish"/></speechtype>
  <speeches><speech name="Only speaker" type="sf"/></speeches>
</debateformat>
"""


@pytest.fixture
def config(tmp_path):
    return Config(
        debate_format_path=None,
        first_overtime_bell=30,
        overtime_bell_period=20,
        silent_mode=True,
        bell_sample_rate=24000,
        state_path=tmp_path / "state.json",
        xml_strings_path=None,
        log_level="INFO",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def session():
    alert_manager = AlertManager(silent_mode=True)
    manager = DebateManager(
        build_default_debate("test"), SpeechManager(alert_manager, timer_factory=FakeTimer)
    )
    return manager, alert_manager


def test_check_valid_file(tmp_path, config, capsys):
    path = tmp_path / "tiny.xml"
    path.write_text(VALID, encoding="utf-8")
    assert cmd_check(Namespace(file=str(path)), config) == 0
    out = capsys.readouterr().out
    assert "Tiny: 1 speeches" in out
    assert "01:00, 01:30" in out


def test_check_without_speeches(tmp_path, config, capsys):
    path = tmp_path / "empty.xml"
    path.write_text('<debateformat xmlns="urn:debatingtimer:debateformat" name="Empty"/>', encoding="utf-8")
    assert cmd_check(Namespace(file=str(path)), config) == 1
    assert "Empty" in capsys.readouterr().err


def test_commands_drive_the_timer(session, capsys):
    manager, alert_manager = session
    assert handle_command(manager, alert_manager, "s")
    assert manager.status == TimerState.RUNNING
    FakeTimer.instances[-1].fire(5)
    assert handle_command(manager, alert_manager, "s")
    assert manager.status == TimerState.STOPPED_BY_USER
    assert handle_command(manager, alert_manager, "n")
    assert manager.current_speech_name == "1st Negative"
    assert handle_command(manager, alert_manager, "p")
    assert manager.current_speech_name == "1st Affirmative"
    assert not handle_command(manager, alert_manager, "q")
    assert "[1st Affirmative] 00:00 / 00:20" in capsys.readouterr().out


def test_switching_speech_while_running_prints_error(session, capsys):
    manager, alert_manager = session
    handle_command(manager, alert_manager, "s")
    handle_command(manager, alert_manager, "n")
    assert "error:" in capsys.readouterr().out
    assert manager.current_speech_name == "1st Affirmative"


def test_status_line(session):
    manager, _ = session
    assert describe_status(manager) == "[1st Affirmative] 00:00 / 00:20  Initial  next bell 00:05  (not_started)"


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
    args = build_parser().parse_args(["run", "--preset", "australs"])
    assert args.preset == "australs"
    assert args.file is None

import os
from pathlib import Path

import pytest

from debate_timer.config import load_config

ENV_VARS = (
    "DEBATE_FORMAT_PATH",
    "FIRST_OVERTIME_BELL",
    "OVERTIME_BELL_PERIOD",
    "SILENT_MODE",
    "BELL_SAMPLE_RATE",
    "STATE_PATH",
    "XML_STRINGS_PATH",
    "LOG_LEVEL",
    "LOG_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # .env values loaded by a test must not leak into the real environment
    environ = {key: value for key, value in os.environ.items() if key not in ENV_VARS}
    monkeypatch.setattr(os, "environ", environ)


def test_defaults(tmp_path):
    config = load_config(tmp_path / "missing.env")
    assert config.debate_format_path is None
    assert config.first_overtime_bell == 30
    assert config.overtime_bell_period == 20
    assert config.silent_mode is False
    assert config.state_path == Path("data/timer_state.json")
    assert config.log_level == "INFO"


def test_env_file_values(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text(
        "FIRST_OVERTIME_BELL=15\nOVERTIME_BELL_PERIOD=0\nSILENT_MODE=yes\nLOG_LEVEL=debug\n",
        encoding="utf-8",
    )
    config = load_config(env)
    assert config.first_overtime_bell == 15
    assert config.overtime_bell_period == 0
    assert config.silent_mode is True
    assert config.log_level == "DEBUG"


def test_invalid_integer(tmp_path, monkeypatch):
    monkeypatch.setenv("FIRST_OVERTIME_BELL", "soon")
    with pytest.raises(ValueError, match="FIRST_OVERTIME_BELL"):
        load_config(tmp_path / "missing.env")


def test_missing_strings_file_is_dropped(tmp_path, monkeypatch):
    monkeypatch.setenv("XML_STRINGS_PATH", str(tmp_path / "nope.json"))
    config = load_config(tmp_path / "missing.env")
    assert config.xml_strings_path is None

import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _get_env_path(name: str) -> Optional[Path]:
    val = os.getenv(name)
    return Path(val) if val else None


@dataclass
class Config:
    debate_format_path: Optional[Path]
    first_overtime_bell: int
    overtime_bell_period: int
    silent_mode: bool
    bell_sample_rate: int
    state_path: Path
    xml_strings_path: Optional[Path]
    log_level: str
    log_dir: Path


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    debate_format_path = _get_env_path("DEBATE_FORMAT_PATH")
    if debate_format_path and not debate_format_path.exists():
        logging.warning("DEBATE_FORMAT_PATH is set but file is missing: %s", debate_format_path)

    xml_strings_path = _get_env_path("XML_STRINGS_PATH")
    if xml_strings_path and not xml_strings_path.exists():
        logging.warning("XML_STRINGS_PATH is set but file is missing: %s", xml_strings_path)
        xml_strings_path = None

    first_overtime_bell = _get_env_int("FIRST_OVERTIME_BELL", 30)
    overtime_bell_period = _get_env_int("OVERTIME_BELL_PERIOD", 20)
    if first_overtime_bell < 0 or overtime_bell_period < 0:
        logging.warning(
            "Negative overtime settings (%s, %s) are not supported", first_overtime_bell, overtime_bell_period
        )

    return Config(
        debate_format_path=debate_format_path,
        first_overtime_bell=first_overtime_bell,
        overtime_bell_period=overtime_bell_period,
        silent_mode=_get_env_bool("SILENT_MODE", False),
        bell_sample_rate=_get_env_int("BELL_SAMPLE_RATE", 24000),
        state_path=Path(os.getenv("STATE_PATH", "data/timer_state.json")),
        xml_strings_path=xml_strings_path,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
    )


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs")) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    log_path = log_dir / "debate_timer.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[file_handler, console_handler],
    )

"""Console front end for the debating timer."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .alerts import AlertManager
from .config import Config, load_config, setup_logging
from .debate_manager import DebateManager
from .errors import DebateFormatNotValidError, TimerStateError
from .formats import DebateFormat, PeriodInfo, format_seconds
from .presets import PRESETS, build_default_debate
from .speech_manager import SpeechManager, TimerState
from .storage import StateBundle, load_state, save_state
from .xml_loader import DebateFormatXmlLoader
from .xml_strings import load_xml_strings

logger = logging.getLogger("debate_timer")

STATE_KEY = "dm"
STATE_FORMAT_NAME = "format"

HELP_TEXT = "commands: s start/stop, r reset, n next speech, p previous speech, b bell, t status, q quit"


def load_format(path: Path, config: Config) -> DebateFormat:
    loader = DebateFormatXmlLoader(load_xml_strings(config.xml_strings_path))
    try:
        debate_format = loader.build_from_file(path)
    finally:
        for error in loader.errors:
            print(f"warning: {error}", file=sys.stderr)
    return debate_format


def describe_status(manager: DebateManager) -> str:
    speech_format = manager.current_speech_format
    period = manager.current_period_info
    next_bell = manager.speech_manager.get_next_bell_time()
    next_text = f"next bell {format_seconds(next_bell)}" if next_bell is not None else "no more bells"
    return (
        f"[{manager.current_speech_name}] {format_seconds(manager.current_speech_time)}"
        f" / {format_seconds(speech_format.length)}"
        f"  {period.description or '-'}  {next_text}  ({manager.status.name.lower()})"
    )


def handle_command(manager: DebateManager, alert_manager: AlertManager, command: str) -> bool:
    """Apply one console command; returns False when the user asks to quit."""
    command = command.strip().lower()
    if command in {"q", "quit", "exit"}:
        return False
    try:
        if command == "s":
            if manager.status == TimerState.RUNNING:
                manager.stop_timer()
            else:
                manager.start_timer()
        elif command == "r":
            if manager.status != TimerState.RUNNING:
                manager.reset_speaker()
        elif command == "n":
            manager.next_speaker()
        elif command == "p":
            manager.previous_speaker()
        elif command == "b":
            alert_manager.play_bell()
        elif command not in {"t", ""}:
            print(HELP_TEXT)
            return True
    except TimerStateError as exc:
        print(f"error: {exc}")
    print(describe_status(manager))
    return True


def _create_player(config: Config):
    if config.silent_mode:
        return None
    from .sounds import BellSoundPlayer

    return BellSoundPlayer(sample_rate=config.bell_sample_rate)


def _print_period(period: PeriodInfo) -> None:
    if period.description:
        print(f"  >> {period.description}")


def cmd_check(args, config: Config) -> int:
    try:
        debate_format = load_format(Path(args.file), config)
    except DebateFormatNotValidError as exc:
        print(f"invalid debate format '{exc.format_name}': {exc}", file=sys.stderr)
        return 1
    print(f"{debate_format.name}: {len(debate_format)} speeches")
    for index, speech in enumerate(debate_format, start=1):
        speech_format = speech.speech_format
        bells = ", ".join(format_seconds(bell.time) for bell in speech_format.bells) or "none"
        print(f"{index}) {speech.name} [{speech_format.ref}] {format_seconds(speech_format.length)} bells: {bells}")
    return 0


def cmd_run(args, config: Config) -> int:
    if args.preset:
        debate_format = build_default_debate(args.preset)
    else:
        path = Path(args.file) if args.file else config.debate_format_path
        if path is None:
            print("no debate format given; pass a file, --preset or set DEBATE_FORMAT_PATH", file=sys.stderr)
            return 2
        try:
            debate_format = load_format(path, config)
        except DebateFormatNotValidError as exc:
            print(f"invalid debate format '{exc.format_name}': {exc}", file=sys.stderr)
            return 1

    player = _create_player(config)
    alert_manager = AlertManager(player, silent_mode=config.silent_mode)
    speech_manager = SpeechManager(
        alert_manager,
        first_overtime_bell=config.first_overtime_bell,
        overtime_bell_period=config.overtime_bell_period,
    )
    speech_manager.add_period_listener(_print_period)
    manager = DebateManager(debate_format, speech_manager)

    bundle = load_state(config.state_path)
    if bundle.get_str(STATE_FORMAT_NAME) == debate_format.name:
        manager.restore_state(STATE_KEY, bundle)
        logger.info("Restored timer state from %s", config.state_path)

    print(HELP_TEXT)
    print(describe_status(manager))
    try:
        while True:
            try:
                line = input()
            except EOFError:
                break
            if not handle_command(manager, alert_manager, line):
                break
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        manager.release()
        bundle = StateBundle()
        if debate_format.name is not None:
            bundle.put_str(STATE_FORMAT_NAME, debate_format.name)
        manager.save_state(STATE_KEY, bundle)
        save_state(config.state_path, bundle)
        if player is not None:
            player.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="debate-timer", description="Debating timer")
    parser.add_argument("--env", default=None, help="Path to a .env file (default: ./.env)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Compile a debate format file and report problems")
    check.add_argument("file", help="Debate format XML file")
    check.set_defaults(func=cmd_check)

    run = subparsers.add_parser("run", help="Run the timer in the console")
    run.add_argument("file", nargs="?", default=None, help="Debate format XML file (default: DEBATE_FORMAT_PATH)")
    run.add_argument("--preset", choices=sorted(PRESETS), default=None, help="Use a built-in debate format")
    run.set_defaults(func=cmd_run)
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(Path(args.env) if args.env else None)
    setup_logging(config.log_level, config.log_dir)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())

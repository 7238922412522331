"""Allow running IntervalTimer as a module: python -m intervaltimer."""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from loguru import logger
from PyQt6.QtWidgets import QApplication

from .audio.sounds import SoundManager
from .lifecycle import LifecycleMonitor
from .settings import Settings, is_log_level, load_settings, parse_duration
from .timer.engine import TimerEngine, format_time
from .ui.console_view import ConsoleView


LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str) -> None:
    """Send log output to stderr so it does not garble the countdown line."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper(), colorize=True)


def _duration_arg(text: str) -> int:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _log_level_arg(text: str) -> str:
    if not is_log_level(text):
        raise argparse.ArgumentTypeError(f"unknown log level: {text!r}")
    return text.upper()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intervaltimer",
        description="Alternating work/rest interval timer.",
    )
    parser.add_argument("--work", type=_duration_arg, help="work phase as MM:SS")
    parser.add_argument("--rest", type=_duration_arg, help="rest phase as MM:SS")
    parser.add_argument("--config", type=Path, help="JSON file with start-up settings")
    parser.add_argument("--mute", action="store_true", help="disable sounds")
    parser.add_argument("--volume", type=int, help="sound volume 0-100")
    parser.add_argument("--round-sound", type=Path, help="custom round-complete sound")
    parser.add_argument("--log-level", type=_log_level_arg, help="DEBUG, INFO, WARNING, ...")
    return parser


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command-line flags win over the config file."""
    if args.work is not None:
        settings.work_duration = args.work
    if args.rest is not None:
        settings.rest_duration = args.rest
    if args.mute:
        settings.sound_enabled = False
    if args.volume is not None:
        settings.sound_volume = args.volume
    if args.round_sound is not None:
        settings.round_sound = str(args.round_sound)
    if args.log_level:
        settings.log_level = args.log_level
    return settings


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_args(load_settings(args.config), args)
    setup_logging(settings.log_level)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("IntervalTimer")
    app.setOrganizationName("IntervalTimer")

    sounds = SoundManager(
        parent=app,
        custom_round_sound=Path(settings.round_sound) if settings.round_sound else None,
    )
    sounds.set_enabled(settings.sound_enabled)
    sounds.set_volume(settings.sound_volume)

    engine = TimerEngine(
        parent=app,
        sink=sounds,
        work_duration=settings.work_duration,
        rest_duration=settings.rest_duration,
    )
    LifecycleMonitor(engine, app, parent=app)
    ConsoleView(engine, parent=app)

    logger.info(
        "Work {} / rest {}",
        format_time(engine.work_duration), format_time(engine.rest_duration),
    )
    engine.start()

    # Ctrl+C ends the process; Qt would otherwise swallow it.
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())

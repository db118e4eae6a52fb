"""Run a headless countdown in the terminal: python -m stillpoint.

Without ``--minutes`` the previous session is picked up where it stopped
(paused, unless ``--resume`` or ``resume_on_launch`` is set).  Ctrl-C
pauses and exits; the next launch continues from there.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .database.db import configure_engine, init_db
from .logger import configure_logging
from .persistence.sql_store import SqlStateStore
from .settings import load_settings
from .timer import TimerEngine, TimerError, TimerPhase, TimerState

logger = logging.getLogger("stillpoint")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="stillpoint", description=__doc__.splitlines()[0])
    parser.add_argument("-m", "--minutes", type=int, help="start a new session of this length")
    parser.add_argument("--resume", action="store_true", help="continue a paused session")
    parser.add_argument("--reset", action="store_true", help="discard the saved session")
    return parser.parse_args(argv)


def _print_state(state: TimerState) -> None:
    print(f"\r{state.formatted}  {state.phase.value:<9}", end="", flush=True)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level, console=settings.log_to_console)

    if settings.db_url:
        configure_engine(settings.db_url)
    init_db()

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("Stillpoint")
    engine = TimerEngine(store=SqlStateStore())

    try:
        if args.reset:
            engine.reset()
        if args.minutes is not None:
            engine.set_duration(args.minutes)
        elif engine.phase is TimerPhase.COMPLETED:
            engine.set_duration(settings.default_minutes)

        if args.minutes is not None or args.resume or settings.resume_on_launch:
            engine.start()
    except TimerError as exc:
        print(f"stillpoint: {exc}", file=sys.stderr)
        return 2

    subscription = engine.subscribe(_print_state)
    if not engine.state.is_running:
        print("\nNot running. Use --minutes N to start or --resume to continue.")
        subscription.close()
        return 0

    engine.completed.connect(lambda _state: app.quit())

    def interrupt(*_args) -> None:
        engine.pause()
        app.quit()

    signal.signal(signal.SIGINT, interrupt)
    # Qt blocks in C++; wake the interpreter so the signal handler can run.
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(200)

    app.exec()
    subscription.close()
    engine.shutdown()
    print()
    logger.info("Exiting with %s", engine.state)
    return 0


if __name__ == "__main__":
    sys.exit(main())

# src/study_planner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then:
- starts the reminder scheduler on a timer loop in a background thread,
- runs the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..core.timers import BackgroundTimerRunner, start_timer_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _start_reminders(state: AppState) -> BackgroundTimerRunner | None:
    runner = start_timer_in_background()
    if runner is None:
        logger.error("Reminders disabled: timer thread failed to start.")
        return None

    # First tick runs right here (tasks already due at startup), then on the timer.
    state.scheduler.start(runner.timer)
    return runner


def _shutdown(state: AppState, runner: BackgroundTimerRunner | None) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        with state.lock:
            state.scheduler.stop()
    except Exception:
        logger.exception("Failed to stop reminder scheduler.")

    if runner is not None:
        runner.stop()
        runner.join(timeout=5.0)

    # Every mutation is written through; this last save only retries a failed one.
    if not state.task_store.last_persist.ok:
        with state.lock:
            result = state.task_store.persist()
        if not result.ok:
            logger.error("Tasks could not be saved on exit: %s", result.error)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    runner = _start_reminders(state)

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()
        if settings.console_enabled:
            # Interrupts the blocking input() so the console loop exits.
            raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
    except (ValueError, OSError):
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            try:
                run_console_loop(state)
            except KeyboardInterrupt:
                logger.info("Console interrupted outside the prompt.")
            stop_main.set()
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state, runner)
        logger.info("Bye.")


if __name__ == "__main__":
    main()

# src/study_planner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _PlannerConsoleFilter(logging.Filter):
    """
    Reminders and command replies share the terminal with log lines, so stderr only
    gets planner records (timer thread at WARNING+) and other sources at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("study_planner.core.timers"):
            return record.levelno >= logging.WARNING
        if record.name.startswith("study_planner."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/study_planner",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the planner's handlers on the root logger and return the log file path.

    - stderr: `console_level`, filtered by _PlannerConsoleFilter
    - <log_dir>/planner.log: `file_level`, unfiltered

    Handlers already on the root logger are replaced, so calling it twice does not
    double every line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "planner.log"

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_PlannerConsoleFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_file), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    logging.captureWarnings(True)
    return log_file

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from rollpurge.env import get_logging_env
from rollpurge.purger import RollingFilePurger
from .console import build_console_handler
from .file import (
    RUN_LOG_BASE_NAME,
    build_file_handler,
    repoint_file_handler,
    run_log_path,
)

_INITIALIZED = False
_LOG_FILE_PATH: Optional[Path] = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def current_log_file() -> Optional[Path]:
    """Run log file of this process, or None when logging to console only."""
    return _LOG_FILE_PATH


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _ensure_run_id() -> str:
    # No dots: the run id becomes the sequence token of the run log name.
    run_id = os.environ.get("ROLLPURGE_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["ROLLPURGE_RUN_ID"] = run_id
    return run_id


def _retain_run_logs(log_dir: Path, keep: int) -> None:
    if keep <= 0:
        return
    RollingFilePurger(log_dir, RUN_LOG_BASE_NAME, keep).purge()


def init_logging() -> None:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Console output goes through Rich unless quiet.
    - A run log file is written only when ROLLPURGE_LOGS_DIR is set;
      old run logs in that directory are purged like any other archive.
    - Safe to call multiple times; file handler is repointed, not stacked.
    """
    global _INITIALIZED, _LOG_FILE_PATH

    env = get_logging_env()
    root = logging.getLogger()

    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    run_id = ""
    logfile: Optional[Path] = None
    if env.logs_dir is not None:
        run_id = _ensure_run_id()
        logfile = run_log_path(env.logs_dir, run_id)

    if _INITIALIZED and _LOG_FILE_PATH == logfile:
        root.setLevel(root_level)
        return

    existing_file: logging.FileHandler | None = None
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            existing_file = h
            break

    root.handlers.clear()
    root.setLevel(root_level)

    if logfile is not None:
        if existing_file is not None:
            repoint_file_handler(existing_file, logfile, run_id)
            root.addHandler(existing_file)
        else:
            root.addHandler(build_file_handler(logfile, run_id))
    elif existing_file is not None:
        existing_file.close()

    if not env.quiet:
        root.addHandler(build_console_handler(root_level))

    _INITIALIZED = True
    _LOG_FILE_PATH = logfile

    if logfile is not None:
        _retain_run_logs(logfile.parent, env.log_retention)

from __future__ import annotations

import logging
import os
from pathlib import Path

# Run logs are named like rolled archives so the purger can retain them.
RUN_LOG_BASE_NAME = "rollpurge.log"

RUN_LOG_FORMAT = "%(asctime)s | %(run_id)s | [%(levelname)s] | %(name)s | %(message)s"


def run_log_path(log_dir: Path, run_id: str) -> Path:
    stem, ext = RUN_LOG_BASE_NAME.rsplit(".", 1)
    return log_dir / f"{stem}.{run_id}.{ext}"


class RunIdFilter(logging.Filter):
    """Stamps every record written to a run log with its run id."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


def build_file_handler(logfile: Path, run_id: str) -> logging.FileHandler:
    logfile.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(logfile, encoding="utf-8")
    handler.addFilter(RunIdFilter(run_id))
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def repoint_file_handler(
    handler: logging.FileHandler, new_logfile: Path, run_id: str
) -> None:
    """Switch an attached handler to another run log without re-adding it."""
    new_logfile.parent.mkdir(parents=True, exist_ok=True)

    old_stream = handler.setStream(new_logfile.open("a", encoding="utf-8"))
    handler.baseFilename = os.path.abspath(new_logfile)
    if old_stream is not None:
        old_stream.close()

    for f in list(handler.filters):
        if isinstance(f, RunIdFilter):
            f.run_id = run_id

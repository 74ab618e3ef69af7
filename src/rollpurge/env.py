from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# ------------------------------------------------------------
# Defaults
# ------------------------------------------------------------

DEFAULT_CAP = 10
DEFAULT_LOG_RETENTION = 30

# ------------------------------------------------------------
# Minimal dotenv loader (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> None:
    """
    Minimal dotenv loader.
    - Silent
    - Never overrides existing os.environ
    """
    if not path.exists():
        return

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()

        if k.startswith("export "):
            k = k[len("export ") :].strip()

        # strip inline comments
        if " #" in v:
            v = v.split(" #", 1)[0].rstrip()
        elif "\t#" in v:
            v = v.split("\t#", 1)[0].rstrip()

        # strip quotes
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]

        if k and k not in os.environ:
            os.environ[k] = v


# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _as_path(v: Optional[str]) -> Optional[Path]:
    if not v or not v.strip():
        return None
    return Path(v.strip()).expanduser()


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    logs_dir: Optional[Path]
    log_retention: int
    verbose: bool
    quiet: bool


def get_logging_env() -> LoggingEnvironment:
    return LoggingEnvironment(
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        logs_dir=_as_path(os.environ.get("ROLLPURGE_LOGS_DIR")),
        log_retention=_as_int(
            os.environ.get("LOG_RETENTION", str(DEFAULT_LOG_RETENTION)),
            DEFAULT_LOG_RETENTION,
        ),
        verbose=_as_bool(os.environ.get("ROLLPURGE_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("ROLLPURGE_QUIET", "0")),
    )


# ------------------------------------------------------------
# Purge target
# ------------------------------------------------------------


@dataclass(frozen=True)
class PurgeEnvironment:
    directory: Optional[Path]
    base_file_name: str
    cap: int

    def require_target(self) -> tuple[Path, str]:
        if self.directory is None:
            raise ConfigError(
                "Missing archive directory (set ROLLPURGE_DIR or pass --dir)"
            )
        if not self.base_file_name:
            raise ConfigError(
                "Missing base file name (set ROLLPURGE_BASE_NAME or pass --base-name)"
            )
        return self.directory, self.base_file_name


def get_purge_env() -> PurgeEnvironment:
    return PurgeEnvironment(
        directory=_as_path(os.environ.get("ROLLPURGE_DIR")),
        base_file_name=os.environ.get("ROLLPURGE_BASE_NAME", "").strip(),
        cap=_as_int(os.environ.get("ROLLPURGE_CAP", str(DEFAULT_CAP)), DEFAULT_CAP),
    )


# ------------------------------------------------------------
# Full runtime environment
# ------------------------------------------------------------


class Environment:
    def __init__(self):
        # Snapshots (immutable)
        self._logging = get_logging_env()
        self._purge = get_purge_env()

        self.run_id = os.environ.get("ROLLPURGE_RUN_ID", "")
        self.command = os.environ.get("ROLLPURGE_COMMAND", "bootstrap")
        self.dry_run = _as_bool(os.environ.get("ROLLPURGE_DRY_RUN", "0"))
        self.env_file = _as_path(os.environ.get("ROLLPURGE_ENV_FILE"))

    @property
    def logging(self) -> LoggingEnvironment:
        return self._logging

    @property
    def purge(self) -> PurgeEnvironment:
        return self._purge

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self._logging.log_level,
                "logs_dir": self._logging.logs_dir or "(console only)",
                "log_retention": self._logging.log_retention,
                "verbose": self._logging.verbose,
                "quiet": self._logging.quiet,
            },
            "Purge": {
                "directory": self._purge.directory or "(unset)",
                "base_file_name": self._purge.base_file_name or "(unset)",
                "cap": self._purge.cap,
                "dry_run": self.dry_run,
            },
            "Run": {
                "run_id": self.run_id or "(none)",
                "command": self.command,
                "python": sys.version.split()[0],
            },
        }


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV

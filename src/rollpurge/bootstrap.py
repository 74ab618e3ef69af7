"""bootstrap.py

Process bootstrap for rollpurge.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from rollpurge.env import _load_dotenv, reset_env_caches


_BOOTSTRAPPED = False


def bootstrap_base_env(env_file: Optional[Path] = None) -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    dotenv_path = Path(
        env_file or os.environ.get("ROLLPURGE_ENV_FILE") or Path.cwd() / ".env"
    )
    # optional: shell / CI variables are enough on their own
    _load_dotenv(dotenv_path)
    os.environ.setdefault("ROLLPURGE_ENV_FILE", str(dotenv_path))

    os.environ.setdefault(
        "ROLLPURGE_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    verbose: bool | None = None,
    quiet: bool | None = None,
    dry_run: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging + the purge commands."""

    os.environ["ROLLPURGE_COMMAND"] = command

    if verbose is not None:
        os.environ["ROLLPURGE_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["ROLLPURGE_QUIET"] = "1" if quiet else "0"
    if dry_run is not None:
        os.environ["ROLLPURGE_DRY_RUN"] = "1" if dry_run else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path

from rollpurge.env import PurgeEnvironment, get_env
from rollpurge.purger import EARLIEST, RollingFilePurger

# Exit code for configuration / argument errors.
EXIT_USAGE = 2


# ----------------------------
# Help dispatch (subparser-local)
# ----------------------------


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: list[str] | None
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


# ----------------------------
# Purge target resolution
# ----------------------------


def add_target_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--dir", help="Archive directory (default: $ROLLPURGE_DIR)")
    p.add_argument(
        "--base-name",
        dest="base_name",
        help="Base file name of the rolling sink, e.g. app.log "
        "(default: $ROLLPURGE_BASE_NAME)",
    )
    p.add_argument(
        "--cap",
        type=int,
        help="Number of archives to keep (default: $ROLLPURGE_CAP or 10)",
    )


def resolve_target(args: argparse.Namespace) -> PurgeEnvironment:
    """CLI flags win over environment values."""
    penv = get_env().purge

    explicit_dir = getattr(args, "dir", None)
    directory = Path(explicit_dir).expanduser() if explicit_dir else penv.directory
    base_name = getattr(args, "base_name", None) or penv.base_file_name
    cap = getattr(args, "cap", None)

    return PurgeEnvironment(
        directory=directory,
        base_file_name=base_name,
        cap=penv.cap if cap is None else cap,
    )


def build_purger(args: argparse.Namespace) -> RollingFilePurger:
    target = resolve_target(args)
    directory, base_name = target.require_target()
    return RollingFilePurger(directory, base_name, target.cap)


# ----------------------------
# CLI output helpers
# ----------------------------


def format_creation_time(ts: datetime) -> str:
    if ts == EARLIEST:
        return "(unreadable)"
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    """
    Simple fixed-width table printer for CLI output.
    """
    if not rows:
        print("(no results)")
        return

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    fmt = "  ".join(f"{{:{w}}}" for w in widths)

    print(fmt.format(*headers))
    print(fmt.format(*("-" * w for w in widths)))

    for row in rows:
        print(fmt.format(*(str(c) for c in row)))

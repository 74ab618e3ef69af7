from __future__ import annotations

import argparse

from rich.markup import escape

from rollpurge.cli.common import (
    EXIT_USAGE,
    add_target_arguments,
    build_purger,
    format_creation_time,
    print_table,
)
from rollpurge.cli.render import RENDER
from rollpurge.env import ConfigError, get_env
from rollpurge.errors import InvalidArgument
from rollpurge.logger import get_logger
from rollpurge.purger import RollingFilePurger

log = get_logger(__name__)


# ============================================================================
# CLI wiring
# ============================================================================


def build_purge_parser(subparsers: argparse._SubParsersAction) -> None:
    purge = subparsers.add_parser(
        "purge", help="Delete archives beyond the retention cap"
    )
    add_target_arguments(purge)
    purge.add_argument(
        "--dry-run",
        action="store_true",
        help="List the archives that would be deleted, delete nothing",
    )
    purge.set_defaults(action="purge")


def build_rank_parser(subparsers: argparse._SubParsersAction) -> None:
    rank = subparsers.add_parser(
        "rank", help="Show matching archives in retention order"
    )
    add_target_arguments(rank)
    rank.set_defaults(action="rank")


def _purger_or_none(args: argparse.Namespace) -> RollingFilePurger | None:
    try:
        return build_purger(args)
    except (ConfigError, InvalidArgument) as e:
        RENDER.print(f"[red]Error:[/red] {escape(str(e))}")
        return None


# ============================================================================
# Handlers
# ============================================================================


def handle_purge(args: argparse.Namespace) -> int:
    purger = _purger_or_none(args)
    if purger is None:
        return EXIT_USAGE

    dry_run = bool(getattr(args, "dry_run", False)) or get_env().dry_run
    log.debug(f"Purge target: {purger!r}")

    if dry_run:
        plan = purger.plan()
        if not plan.excess:
            print("Nothing to purge")
            return 0

        print(f"DRY RUN - {len(plan.excess)} archive(s) would be deleted:")
        for archive in plan.excess:
            print(f"  {archive.path}")
        return 0

    purger.purge()
    return 0


def handle_rank(args: argparse.Namespace) -> int:
    purger = _purger_or_none(args)
    if purger is None:
        return EXIT_USAGE

    ranked = purger.rank()
    rows = []
    for i, archive in enumerate(ranked, start=1):
        rows.append(
            [
                str(i),
                archive.file_name,
                format_creation_time(archive.creation_time),
                archive.sequence_token or "-",
                "keep" if i <= purger.cap else "purge",
            ]
        )

    print(f"Pattern: {purger.search_pattern} in {purger.directory} (cap {purger.cap})")
    print_table(["#", "file", "created (UTC)", "token", "action"], rows)
    return 0

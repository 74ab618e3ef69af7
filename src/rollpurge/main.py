#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from typing import Optional

from rollpurge.bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   rollpurge help
    #   rollpurge help purge
    #   rollpurge purge help
    argv = [a for a in argv if a != "help"]
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    try:
        parser.parse_args(argv[:1] + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rollpurge",
        description="Keep the most recent archives of a rolling log file.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="No console logging")

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from rollpurge.cli.cli_env import build_env_parser
    from rollpurge.cli.cli_purge import build_purge_parser, build_rank_parser

    build_purge_parser(sub)
    build_rank_parser(sub)
    build_env_parser(sub)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    bootstrap_base_env()

    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)

    # Unified help routing
    if getattr(args, "_help", False) or (unknown and unknown[-1] == "help"):
        return _dispatch_help(argv)
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")

    # Stamp run context early
    bootstrap_run_context(
        command=args.command,
        # unset flags leave ROLLPURGE_VERBOSE / _QUIET / _DRY_RUN in charge
        verbose=args.verbose or None,
        quiet=args.quiet or None,
        dry_run=getattr(args, "dry_run", False) or None,
    )

    # Initialize logging AFTER run-context env stamping
    from rollpurge.logger import init_logging, get_logger

    init_logging()
    log = get_logger(__name__)
    log.debug(f"Command: {args.command}")

    # Dispatch
    if args.command == "purge":
        from rollpurge.cli.cli_purge import handle_purge

        return handle_purge(args)

    if args.command == "rank":
        from rollpurge.cli.cli_purge import handle_rank

        return handle_rank(args)

    if args.command == "env":
        from rollpurge.cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse

from rich.table import Table
from rich.text import Text

from rollpurge.cli.common import dispatch_subparser_help, resolve_target
from rollpurge.cli.render import RENDER
from rollpurge.env import ConfigError, get_env
from rollpurge.errors import InvalidArgument
from rollpurge.logger import current_log_file
from rollpurge.purger import RollingFilePurger


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Configuration utilities")
    sub = env.add_subparsers(dest="env_cmd", required=True)

    help_p = sub.add_parser("help", help="Show help for env")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=env)

    dump_p = sub.add_parser(
        "dump", help="Show resolved settings and the archive pattern they produce"
    )
    dump_p.set_defaults(action="dump")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "dump":
        return handle_env_dump(args)

    raise RuntimeError(f"Unknown env action: {args.action}")


def _resolved_rows(args: argparse.Namespace) -> list[tuple[str, str]]:
    env = get_env()

    if env.env_file is None:
        env_file = "(none)"
    else:
        state = "loaded" if env.env_file.exists() else "not found"
        env_file = f"{env.env_file} ({state})"

    target = resolve_target(args)
    try:
        directory, base_name = target.require_target()
        purger = RollingFilePurger(directory, base_name, target.cap)
        pattern = str(purger.directory / purger.search_pattern)
    except (ConfigError, InvalidArgument) as e:
        pattern = f"(incomplete: {e})"

    run_log = current_log_file()

    return [
        ("env_file", env_file),
        ("search_pattern", pattern),
        ("run_log", str(run_log) if run_log else "(console only)"),
    ]


def handle_env_dump(args: argparse.Namespace) -> int:
    table = Table(title="rollpurge configuration", show_header=True)
    table.add_column("section", style="bold cyan")
    table.add_column("key")
    table.add_column("value", overflow="fold")

    for section, values in get_env().as_dict().items():
        for key, value in values.items():
            table.add_row(section, key, Text(str(value)))

    for key, value in _resolved_rows(args):
        table.add_row("Resolved", key, Text(value))

    RENDER.print(table)
    return 0

# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for bu-build.

This module provides the ``bu-build`` entry point. Every task registered in
bubuild.core becomes a subcommand; options the CLI does not know are passed
through to the wrapped tool.

Example:
    Production build:
        ```bash
        $ bu-build build
        ```

    Development mode with watchers:
        ```bash
        $ bu-build start
        ```

    Pass options through to wp-scripts:
        ```bash
        $ bu-build build:scripts --webpack-bundle-analyzer
        ```

    Print the composed webpack configs:
        ```bash
        $ bu-build config webpack.base.json --output webpack.composed.json
        ```

    Enable verbose output:
        ```bash
        $ bu-build build --verbose
        ```

Exit Codes:

- 0: Success (or help shown)
- 1: Error (unknown command, configuration problem, or tool failure)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Subparsers are generated from the task registry, so a new task only has
    to be registered to become a command.
    Verbose mode shows full tracebacks on errors for debugging.
    Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
import sys

from bubuild import __version__
from bubuild.context import RunContext
from bubuild.core import (
    DEFAULT_BASE_CONFIG,
    available_tasks,
    compose_webpack_config,
    run_task,
)
from bubuild.exceptions import BuildToolkitError
from bubuild.logging import get_logger, set_global_logger
from bubuild.webpack import dump_configs

HELP_FLAGS = ("help", "--help", "-h")


def print_banner() -> None:
    """Print the toolkit banner."""
    print("=" * 70)
    print(f"  BU Build Tools - Version {__version__}")
    print("  bu-build-toolkit")
    print("=" * 70)
    print()


def _context(args: argparse.Namespace, extras: Sequence[str]) -> RunContext:
    return RunContext(
        root=Path.cwd(),
        args=tuple(extras),
        banner_shown=args.no_banner,
        verbose=args.verbose or args.debug,
        debug=args.debug,
    )


def _report_error(err: BaseException, args: argparse.Namespace) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()
    return 1


def cmd_task(args: argparse.Namespace, ctx: RunContext) -> int:
    """Handler for every registered task.

    Args:
        args: Parsed command-line arguments.
        ctx: Execution context for the top-level invocation.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    try:
        run_task(args.command, ctx)
    except BuildToolkitError as err:
        return _report_error(err, args)
    return 0


def cmd_config(args: argparse.Namespace, ctx: RunContext) -> int:
    """Handler for 'bu-build config'.

    Composes the blocks and theme webpack configs from a JSON dump of the
    @wordpress/scripts default config and prints them, or writes them to
    ``--output``.

    Args:
        args: Parsed command-line arguments containing the base dump path
            and optional output path.
        ctx: Execution context for the top-level invocation.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    base_path = Path(args.base).resolve()
    try:
        if args.output is None:
            run_task("config", replace(ctx, args=(str(base_path),)))
            return 0
        text = dump_configs(compose_webpack_config(ctx.root, base_path))
    except BuildToolkitError as err:
        return _report_error(err, args)

    output = Path(args.output)
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as err:
        return _report_error(err, args)

    print(f"[SUCCESS] Webpack configs written to {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per registered task."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    common.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    common.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the toolkit banner",
    )

    parser = argparse.ArgumentParser(
        prog="bu-build",
        description="BU Build Tools for WordPress themes and plugins",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"bu-build {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for task in available_tasks():
        sub = subparsers.add_parser(task.name, help=task.help, parents=[common])
        sub.set_defaults(func=cmd_task)

    # 'config' takes its own arguments instead of passing them through
    parser_config = subparsers.choices["config"]
    parser_config.add_argument(
        "base",
        nargs="?",
        default=DEFAULT_BASE_CONFIG,
        help=f"JSON dump of the wp-scripts webpack config (default: {DEFAULT_BASE_CONFIG})",
    )
    parser_config.add_argument(
        "--output",
        default=None,
        help="Write the composed configs to this file instead of stdout",
    )
    parser_config.set_defaults(func=cmd_config)

    return parser


def _prints_data(args: argparse.Namespace) -> bool:
    # stdout of these commands is the result itself
    if args.command == "help":
        return True
    return args.command == "config" and args.output is None


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run a command.

    Returns:
        The process exit code.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    commands = {task.name for task in available_tasks()}

    command = argv[0] if argv else None
    if command is None or command in HELP_FLAGS[1:]:
        set_global_logger(get_logger())
        run_task("help", RunContext(root=Path.cwd()))
        return 0
    if command == "--version":
        parser.parse_args(argv)
    if command not in commands:
        print(f"Unknown command: {command}", file=sys.stderr)
        print("Run 'bu-build help' to see available commands.", file=sys.stderr)
        return 1

    args, extras = parser.parse_known_args(argv)

    # Configure global logger
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    ctx = _context(args, extras)
    if not ctx.banner_shown and not _prints_data(args):
        print_banner()
        ctx = ctx.announced()

    try:
        return args.func(args, ctx)
    except KeyboardInterrupt:
        print()
        return 130


def main() -> None:
    """Main entry point for the bu-build CLI.

    This function is registered as the 'bu-build' console script in
    pyproject.toml.
    """
    sys.exit(run())


if __name__ == "__main__":
    main()

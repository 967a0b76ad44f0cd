"""
Command-line interface for Nativize

Rewrites jQuery and legacy JavaScript idioms in files or directories, reports
files that would change, or prints diffs, with rich terminal output.

Exit codes: 0 success, 1 files failed (or, for ``check``, would change),
2 usage or configuration errors.
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional, TextIO

from nativize import __version__
from nativize.cli.commands import cmd_check, cmd_config, cmd_diff, cmd_rules, cmd_upgrade
from nativize.cli.rich_output import get_rich_output, set_rich_enabled
from nativize.config import ConfigurationError, load_config
from nativize.errors import NativizeError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

COMMANDS = {
    "upgrade": cmd_upgrade,
    "check": cmd_check,
    "diff": cmd_diff,
    "rules": cmd_rules,
    "config": cmd_config,
}


def _is_machine_readable(args: Any) -> bool:
    return bool(getattr(args, "machine_readable", False))


def _json_stdout(args: Any) -> TextIO:
    """
    When --machine-readable is enabled, main() redirects sys.stdout -> sys.stderr
    to keep stray output out of the JSON stream. This returns the original stdout.
    """
    return getattr(args, "_json_stdout", sys.__stdout__)


def _print_json_to_stdout(args: Any, payload: Any) -> None:
    """Always print JSON to the original stdout in machine-readable mode."""
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str), file=_json_stdout(args))


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _add_path_command(subparsers, name: str, help_text: str) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text)
    parser.add_argument("paths", nargs="+", help="Files or directories to process")
    _add_rule_options(parser)
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        help="Number of worker processes (files are processed in parallel when > 1)",
    )
    return parser


def _add_rule_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-jquery", action="store_true", help="Skip the jquery rule group"
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="GROUP",
        help="Run only this rule group (repeatable)",
    )
    parser.add_argument(
        "--disable",
        action="append",
        metavar="RULE",
        help="Disable a rule by name (repeatable)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="nativize",
        description="Nativize - rewrite jQuery and legacy JavaScript idioms into native code",
        epilog='Use "nativize <command> --help" for detailed command help.',
    )

    # Global options
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output and debug logging",
    )
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )
    parser.add_argument(
        "--machine-readable",
        action="store_true",
        help="Output in machine-readable format (JSON)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _add_path_command(subparsers, "upgrade", "Rewrite files in place")
    _add_path_command(subparsers, "check", "Report files that would change (exit 1 if any)")
    _add_path_command(subparsers, "diff", "Print unified diffs without writing files")

    rules_parser = subparsers.add_parser("rules", help="List registered rules")
    _add_rule_options(rules_parser)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--show", action="store_true", help="Show the effective configuration (default)"
    )
    config_group.add_argument("--init", metavar="FILE", help="Write a default configuration file")
    config_parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Format of the file written by --init (default: json)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    saved_stdout = sys.stdout
    if _is_machine_readable(args):
        args._json_stdout = sys.stdout
        sys.stdout = sys.stderr

    try:
        setup_logging(getattr(args, "verbose", False))
        set_rich_enabled(not args.no_rich and not _is_machine_readable(args))

        try:
            config = load_config(args.config)
            return COMMANDS[args.command](args, config)
        except (ConfigurationError, NativizeError) as e:
            if _is_machine_readable(args):
                _print_json_to_stdout(
                    args, {"success": False, "error": str(e), "command": args.command}
                )
            get_rich_output().print_error(f"Error: {e}")
            return EXIT_USAGE
        except KeyboardInterrupt:
            if _is_machine_readable(args):
                _print_json_to_stdout(args, {"success": False, "error": "cancelled_by_user"})
            print("\nOperation cancelled by user", file=sys.stderr)
            return EXIT_FAILURE
    finally:
        sys.stdout = saved_stdout


if __name__ == "__main__":
    sys.exit(main())

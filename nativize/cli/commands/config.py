"""
Configuration and rule listing commands for the Nativize CLI.

This module contains command handlers for:
- Configuration management (show, init)
- Rule listing
"""

from typing import Any

from nativize.api import Nativize
from nativize.cli.rich_output import get_rich_output
from nativize.config import NativizeConfig

from .transform import apply_overrides


def cmd_config(args: Any, config: NativizeConfig) -> int:
    """Handle config command."""
    from nativize.cli_entry import _is_machine_readable, _print_json_to_stdout

    output = get_rich_output()
    if args.init:
        NativizeConfig.default().to_file(args.init, args.format)
        output.print_success(f"Default configuration file created at {args.init}")
        output.print_info("Edit the file to customize your Nativize settings.")
        return 0

    if _is_machine_readable(args):
        _print_json_to_stdout(args, config.to_dict())
    else:
        output.print_header("Current Nativize Configuration")
        output.console.print(config.get_config_summary())
    return 0


def cmd_rules(args: Any, config: NativizeConfig) -> int:
    """Handle rules command."""
    from nativize.cli_entry import _is_machine_readable, _print_json_to_stdout

    rules = Nativize(apply_overrides(args, config)).list_rules()
    if _is_machine_readable(args):
        _print_json_to_stdout(args, rules)
        return 0

    output = get_rich_output()
    table = output.create_table("Rules", ["Rule", "Group", "Enabled", "Description"])
    for entry in rules:
        output.add_table_row(
            table,
            entry["name"],
            entry["group"],
            "yes" if entry["enabled"] else "no",
            entry["description"],
        )
    output.print_table(table)
    return 0

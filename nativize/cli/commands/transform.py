"""
Transformation commands for the Nativize CLI.

This module contains command handlers for:
- upgrade: rewrite files in place
- check: report files that would change
- diff: print unified diffs without writing
"""

import logging
from typing import Any

from nativize.api import Nativize
from nativize.cli.rich_output import get_rich_output
from nativize.config import NativizeConfig, ProcessingStrategy
from nativize.orchestration.batch import BatchResult, ProcessingMode
from nativize.orchestration.reporter import RunReporter

logger = logging.getLogger(__name__)


def apply_overrides(args: Any, config: NativizeConfig) -> NativizeConfig:
    """Fold command-line rule and job options into ``config``."""
    rules = config.rules_settings
    only = getattr(args, "only", None)
    if only:
        rules.enabled_groups = list(dict.fromkeys(only))
    if getattr(args, "no_jquery", False):
        rules.enabled_groups = [g for g in rules.enabled_groups if g != "jquery"]
    disabled = getattr(args, "disable", None)
    if disabled:
        rules.disabled_rules = list(dict.fromkeys(rules.disabled_rules + disabled))

    jobs = getattr(args, "jobs", None)
    if jobs is not None:
        processing = config.processing_settings
        processing.jobs = jobs
        processing.strategy = (
            ProcessingStrategy.PARALLEL if jobs > 1 else ProcessingStrategy.SEQUENTIAL
        )
    config.validate()
    return config


def _run(args: Any, config: NativizeConfig, mode: ProcessingMode) -> BatchResult:
    from nativize.cli_entry import _is_machine_readable, _print_json_to_stdout

    nativize = Nativize(apply_overrides(args, config))
    batch = nativize.process_paths(args.paths, mode)

    reporter = RunReporter(get_rich_output())
    if _is_machine_readable(args):
        _print_json_to_stdout(args, reporter.generate_report(batch))
    else:
        reporter.print_report(batch, show_unchanged=getattr(args, "verbose", False))
    return batch


def cmd_upgrade(args: Any, config: NativizeConfig) -> int:
    """Handle upgrade command."""
    batch = _run(args, config, ProcessingMode.WRITE)
    return 1 if batch.failed else 0


def cmd_check(args: Any, config: NativizeConfig) -> int:
    """Handle check command: exit 1 when any file would change."""
    batch = _run(args, config, ProcessingMode.CHECK)
    return 1 if batch.failed or batch.changed else 0


def cmd_diff(args: Any, config: NativizeConfig) -> int:
    """Handle diff command."""
    batch = _run(args, config, ProcessingMode.DIFF)
    return 1 if batch.failed else 0

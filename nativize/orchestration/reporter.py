"""
Run reporter for Nativize

Summarizes a batch run as a rich table or as JSON.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from ..cli.rich_output import RichOutputManager, get_rich_output
from .batch import BatchResult, FileStatus, ProcessingMode

STATUS_LABELS = {
    ProcessingMode.WRITE: {FileStatus.CHANGED: "rewritten"},
    ProcessingMode.CHECK: {FileStatus.CHANGED: "would change"},
    ProcessingMode.DIFF: {FileStatus.CHANGED: "would change"},
}


class RunReporter:
    """Formats ``BatchResult``s for people and machines."""

    def __init__(self, output: Optional[RichOutputManager] = None):
        self.output = output or get_rich_output()

    def _label(self, batch: BatchResult, status: FileStatus) -> str:
        return STATUS_LABELS[batch.mode].get(status, status.value)

    def generate_report(self, batch: BatchResult) -> Dict[str, Any]:
        """Machine-readable report of a run."""
        rule_counts: Dict[str, int] = {}
        for result in batch.changed:
            for name in result.applied_rules:
                rule_counts[name] = rule_counts.get(name, 0) + 1
        report = batch.to_dict()
        report["generated_at"] = datetime.now().isoformat(timespec="seconds")
        report["rules"] = dict(sorted(rule_counts.items()))
        return report

    def print_report(self, batch: BatchResult, show_unchanged: bool = False) -> None:
        """Print diffs (in diff mode), a per-file table and a summary line."""
        output = self.output

        if batch.mode is ProcessingMode.DIFF:
            for result in batch.changed:
                output.print_code(result.diff, language="diff", title=result.path)

        rows = [r for r in batch.files if show_unchanged or r.status is not FileStatus.UNCHANGED]
        if rows:
            table = output.create_table("Nativize results", ["File", "Status", "Rules"])
            for result in rows:
                detail = ", ".join(result.applied_rules) if result.applied_rules else (result.error or "")
                output.add_table_row(table, result.path, self._label(batch, result.status), detail)
            output.print_table(table)

        changed = len(batch.changed)
        failed = len(batch.failed)
        summary = (
            f"{len(batch.files)} file(s) processed, {changed} "
            f"{self._label(batch, FileStatus.CHANGED)}, {failed} failed "
            f"in {batch.duration:.2f}s"
        )
        if failed:
            output.print_error(summary)
        elif changed and batch.mode is not ProcessingMode.WRITE:
            output.print_warning(summary)
        else:
            output.print_success(summary)

"""
Rich terminal output utilities for the Nativize CLI.

Provides tables, highlighted diffs and status lines; with rich formatting
disabled the same calls print plain text.
"""

from typing import Dict, List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table


class RichOutputManager:
    """Manages rich terminal output with a plain-text mode."""

    def __init__(self, use_rich: bool = True, file=None):
        """Initialize the output manager."""
        self.use_rich = use_rich
        if use_rich:
            self.console = Console(file=file)
        else:
            self.console = Console(
                file=file, color_system=None, markup=False, highlight=False, emoji=False
            )

    def print_header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a formatted header."""
        if self.use_rich:
            header_text = f"[bold blue]{escape(title)}[/bold blue]"
            if subtitle:
                header_text += f"\n[dim]{escape(subtitle)}[/dim]"
            self.console.print(Panel(header_text, border_style="blue", padding=(0, 2)))
        else:
            self.console.print(f"\n=== {title} ===")
            if subtitle:
                self.console.print(subtitle)
            self.console.print()

    def print_section(self, title: str) -> None:
        """Print a section separator."""
        if self.use_rich:
            self.console.rule(f"[bold]{escape(title)}[/bold]", style="blue")
        else:
            self.console.print(f"\n--- {title} ---")

    def _status_line(self, symbol: str, color: str, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[{color}]{symbol}[/{color}] {escape(message)}")
        else:
            self.console.print(f"{symbol} {message}")

    def print_success(self, message: str) -> None:
        self._status_line("✓", "green", message)

    def print_warning(self, message: str) -> None:
        self._status_line("⚠", "yellow", message)

    def print_error(self, message: str) -> None:
        self._status_line("✗", "red", message)

    def print_info(self, message: str) -> None:
        self._status_line("ℹ", "blue", message)

    def create_table(self, title: str, columns: List[str]) -> Union[Table, Dict]:
        """Create a rich table (a plain dict in plain-text mode)."""
        if self.use_rich:
            table = Table(title=title, show_header=True, header_style="bold blue")
            for column in columns:
                table.add_column(column)
            return table
        return {"title": title, "columns": columns, "rows": []}

    def add_table_row(self, table: Union[Table, Dict], *values) -> None:
        """Add a row to the table."""
        if isinstance(table, Table):
            table.add_row(*[escape(str(v)) for v in values])
        else:
            table["rows"].append(values)

    def print_table(self, table: Union[Table, Dict]) -> None:
        """Print the table."""
        if isinstance(table, Table):
            self.console.print(table)
            return
        self.console.print(f"\n{table['title']}")
        self.console.print("-" * len(table["title"]))
        header = " | ".join(table["columns"])
        self.console.print(header)
        self.console.print("-" * len(header))
        for row in table["rows"]:
            self.console.print(" | ".join(str(v) for v in row))
        self.console.print()

    def print_code(self, code: str, language: str = "javascript", title: Optional[str] = None) -> None:
        """Print code (or a diff) with syntax highlighting."""
        if title:
            self.print_section(title)
        if self.use_rich:
            self.console.print(Syntax(code, language, theme="monokai"))
        else:
            self.console.print(code, end="" if code.endswith("\n") else "\n")


# Global instance
rich_output = RichOutputManager()


def set_rich_enabled(enabled: bool) -> None:
    """Enable or disable rich output globally."""
    global rich_output
    rich_output = RichOutputManager(use_rich=enabled)


def get_rich_output() -> RichOutputManager:
    """Get the global rich output manager."""
    return rich_output

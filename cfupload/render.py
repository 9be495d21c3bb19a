"""Console output for cfupload.

``Reporter`` prints the progress, success and error lines of a run and
``OutputFormatter`` renders the final summary as a table, JSON or YAML.
"""

import json
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .exceptions import ConfigError

OUTPUT_FORMATS = ("table", "json", "yaml")


class Reporter:
    """Prints run status lines to a shared Rich console."""

    def __init__(self, console: Optional[Console] = None, debug: bool = False) -> None:
        """Initialize the reporter.

        Args:
            console: Rich console instance. If None, creates a new one.
            debug: Whether debug lines are printed
        """
        self.console = console or Console()
        self.debug_enabled = debug

    def info(self, message: str) -> None:
        self.console.print(f"[blue]{escape(message)}[/blue]")

    def progress(self, message: str) -> None:
        self.console.print(f"[blue]>> Progress: {escape(message)}[/blue]")

    def success(self, message: str) -> None:
        self.console.print(f"[green]>> Success: {escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]")

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self.console.print(f"[dim]{escape(message)}[/dim]")


class OutputFormatter:
    """Renders the upload summary in the requested format."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize output formatter.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console()

    def render(self, data: List[Dict[str, Any]], format: str = "table", title: Optional[str] = None) -> None:
        """Render rows in the specified format.

        Args:
            data: Rows to render
            format: Output format (table, json, yaml)
            title: Table title

        Raises:
            ConfigError: If the format is unknown
        """
        format_name = format.lower()

        if format_name == "table":
            self.render_table(data, title=title)
        elif format_name == "json":
            self.render_json(data)
        elif format_name == "yaml":
            self.render_yaml(data)
        else:
            raise ConfigError(f"Unknown output format: {format}. Choose from {', '.join(OUTPUT_FORMATS)}")

    def render_table(self, data: List[Dict[str, Any]], title: Optional[str] = None) -> None:
        if not data:
            self.console.print("[dim]No data to display[/dim]")
            return

        table = Table(title=title)
        columns = list(data[0].keys())
        for column in columns:
            table.add_column(column.replace("_", " ").title(), style="cyan" if column == "entry_id" else None)

        for row in data:
            table.add_row(*["—" if row.get(column) is None else str(row.get(column)) for column in columns])

        self.console.print(table)

    def render_json(self, data: Any, indent: int = 2) -> None:
        output = json.dumps(data, indent=indent, ensure_ascii=False, default=str)
        self.console.out(output, highlight=False)

    def render_yaml(self, data: Any) -> None:
        output = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        self.console.out(output.rstrip("\n"), highlight=False)

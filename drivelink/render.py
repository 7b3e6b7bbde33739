"""Output rendering and formatting utilities.

This module provides the output formatter used by the CLI for displaying
resolution results as tables, JSON, or YAML.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional, Union

import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .exceptions import ValidationError

STATUS_STYLES = {
    "resolved": "green",
    "exhausted": "red",
}


class OutputFormatter:
    """Main output formatter that handles multiple output formats."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize output formatter.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console()

    def determine_format(self, format_override: Optional[str] = None) -> str:
        """Determine the output format to use.

        Args:
            format_override: Explicit format override

        Returns:
            Format name (table, json, yaml)
        """
        if format_override:
            return format_override.lower()

        env_format = os.environ.get("DRIVELINK_OUTPUT_FORMAT")
        if env_format:
            return env_format.lower()

        # Piped output gets machine-readable JSON
        if sys.stdout.isatty():
            return "table"
        return "json"

    def render(
        self,
        data: Any,
        format: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Render data in the specified format.

        Args:
            data: Data to render
            format: Output format (table, json, yaml)
            **kwargs: Additional formatting options

        Raises:
            ValidationError: If the format is unknown
        """
        format_name = self.determine_format(format)

        if format_name == "table":
            self.render_table(data, **kwargs)
        elif format_name == "json":
            self.render_json(data)
        elif format_name == "yaml":
            self.render_yaml(data)
        else:
            raise ValidationError(f"Unknown output format: {format_name}")

    def render_table(
        self,
        data: Union[List[Dict[str, Any]], Dict[str, Any]],
        columns: Optional[List[str]] = None,
        title: Optional[str] = None,
        show_lines: bool = False,
        **kwargs: Any,
    ) -> None:
        """Render data as a table using Rich.

        Args:
            data: Row dictionaries, or a single dictionary
            columns: Column names to display; all keys when omitted
            title: Table title
            show_lines: Whether to show row separators
        """
        if not data:
            self.console.print("[dim]No data to display[/dim]")
            return

        if isinstance(data, dict):
            data = [data]

        if not columns:
            columns = []
            for item in data:
                for key in item:
                    if key not in columns:
                        columns.append(key)

        table = Table(title=title, show_lines=show_lines, box=box.ROUNDED)
        for col in columns:
            table.add_column(col.replace("_", " ").title(), overflow="fold")

        for item in data:
            row = []
            for col in columns:
                value = item.get(col, "")
                if value is None:
                    value = ""
                elif isinstance(value, bool):
                    value = "✓" if value else "✗"
                elif isinstance(value, (list, dict)):
                    value = json.dumps(value, default=str)
                value = str(value)
                if col == "status" and value in STATUS_STYLES:
                    value = f"[{STATUS_STYLES[value]}]{value}[/{STATUS_STYLES[value]}]"
                row.append(value)
            table.add_row(*row)

        self.console.print(table)

    def render_json(self, data: Any, pretty: bool = True, indent: int = 2) -> None:
        """Render data as JSON.

        Raises:
            ValidationError: If the data cannot be serialized
        """
        try:
            output = json.dumps(
                data,
                indent=indent if pretty else None,
                ensure_ascii=False,
                default=str,
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Failed to serialize data to JSON: {e}")
        print(output)

    def render_yaml(self, data: Any) -> None:
        """Render data as YAML.

        Raises:
            ValidationError: If the data cannot be serialized
        """
        try:
            print(yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False), end="")
        except yaml.YAMLError as e:
            raise ValidationError(f"Failed to serialize data to YAML: {e}")

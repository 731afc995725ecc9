"""
Rendering functions for regsweep output.

This module handles the pretend-mode report and table formatting.
Services return data; this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Optional

from .services.executor import ExecutionReport, TagEntry

console = Console()

DEFAULT_NAME_WIDTH = 32
DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def format_entry(sign: str, entry: TagEntry, name_width: int = DEFAULT_NAME_WIDTH,
                 time_format: str = DEFAULT_TIME_FORMAT) -> str:
    """One report line: sign, padded tag reference, UTC last-update time."""
    when = entry.last_update_time.strftime(time_format)
    return f"{sign} {entry.ref:<{name_width}} {when}"


def render_text_report(report: ExecutionReport, name_width: int = DEFAULT_NAME_WIDTH,
                       time_format: str = DEFAULT_TIME_FORMAT) -> List[str]:
    """
    Render the two-column report.

    Kept tags are prefixed '+', stale tags '-'. Kept tags come first;
    each group is ordered by last update.
    """
    lines = [format_entry('+', e, name_width, time_format) for e in report.kept]
    lines.extend(format_entry('-', e, name_width, time_format) for e in report.removed)
    return lines


def render_report_table(report: ExecutionReport, time_format: str = DEFAULT_TIME_FORMAT,
                        out: Optional[Console] = None) -> None:
    """
    Render the report as a pretty table.

    Args:
        report: Execution report
        time_format: strftime format for last update times
        out: Console to print to (module console by default)
    """
    out = out or console

    if not report.kept and not report.removed:
        out.print("[yellow]No tags found.[/yellow]")
        return

    title = "Sweep Plan" if report.pretend else "Sweep Result"
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("", width=1)
    table.add_column("Tag", style="cyan")
    table.add_column("Last Update", style="dim")
    table.add_column("Images", justify="right", style="yellow")

    for entry in report.kept:
        table.add_row("[green]+[/green]", entry.ref,
                      entry.last_update_time.strftime(time_format), "")
    for entry in report.removed:
        table.add_row("[red]-[/red]", entry.ref,
                      entry.last_update_time.strftime(time_format), str(len(entry.images)))

    out.print(table)

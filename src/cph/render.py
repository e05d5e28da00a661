"""Rendering helpers for cph output.

Tables are borderless and left-aligned; statuses are colour-coded with
Rich markup. Nothing here talks to AWS.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.measure import Measurement
from rich.table import Table

from cph.models import ActionStatus, ApprovalDecision

if TYPE_CHECKING:
    from datetime import datetime

    from rich.console import Console

    from cph.models import ApprovalResult, Execution

__all__ = [
    "STATUS_STYLES",
    "build_approval_table",
    "build_execution_table",
    "create_table",
    "format_menu_entry",
    "format_status",
    "format_timestamp",
    "print_line",
    "print_table",
]

# Upper bound used when measuring a table's natural width.
_MEASURE_WIDTH = 10_000

STATUS_STYLES: dict[str, str] = {
    ActionStatus.IN_PROGRESS.value: "blue",
    ActionStatus.FAILED.value: "red",
    ActionStatus.STOPPED.value: "red",
    ActionStatus.STOPPING.value: "yellow",
    ActionStatus.SUCCEEDED.value: "green",
    ActionStatus.SUPERSEDED.value: "dim",
    ActionStatus.CANCELLED.value: "dim",
    ActionStatus.ABANDONED.value: "dim",
}


def create_table(*columns: str) -> Table:
    """Create a borderless, left-aligned table with the given headers.

    Args:
        columns: Column headers, in display order.

    Returns:
        An empty Rich table.
    """
    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold", padding=(0, 4, 0, 0))
    for column in columns:
        table.add_column(column, justify="left", no_wrap=True)
    return table


def print_table(console: Console, table: Table) -> None:
    """Print a table at its natural width, never shortening a cell.

    Rich fits tables to the console (80 columns when output is piped) and
    truncates cells with an ellipsis. Names and execution IDs must stay
    intact, so the table is sized to its content and lines longer than the
    console are left to the terminal.

    Args:
        console: Destination console.
        table: Table built with :func:`create_table`.
    """
    measurement = Measurement.get(console, console.options.update_width(_MEASURE_WIDTH), table)
    table.width = measurement.maximum
    console.print(table, crop=False)


def print_line(console: Console, text: str) -> None:
    """Print one markup line without wrapping it at the console width."""
    console.print(text, soft_wrap=True)


def format_status(status: ActionStatus | str | None) -> str:
    """Return the status wrapped in its colour markup.

    Examples:
        >>> format_status("Succeeded")
        '[green]Succeeded[/]'
        >>> format_status(None)
        '-'
    """
    if not status:
        return "-"
    value = status.value if isinstance(status, ActionStatus) else str(status)
    style = STATUS_STYLES.get(value)
    return f"[{style}]{escape(value)}[/]" if style else escape(value)


def format_timestamp(value: datetime | None, date_format: str) -> str:
    """Format a timestamp in the local timezone.

    Naive datetimes are taken as local already.
    """
    if value is None:
        return "-"
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(date_format)


def format_menu_entry(index: int, name: str, detail: str | None = None) -> str:
    """Return one enumerated menu line, e.g. ``    [2] deploy-api (Approval)``."""
    entry = f"    \\[{index}] {escape(name)}"
    if detail:
        entry += f" ({escape(detail)})"
    return entry


def build_execution_table(executions: list[Execution]) -> Table:
    """Build the Pipeline / Execution ID table printed after a run."""
    table = create_table("Pipeline", "Execution ID")
    for execution in executions:
        table.add_row(escape(execution.pipeline_name), execution.execution_id)
    return table


def build_approval_table(results: list[ApprovalResult]) -> Table:
    """Build the Pipeline / Stage / Decision table printed after an approval."""
    table = create_table("Pipeline", "Stage", "Decision")
    for result in results:
        table.add_row(escape(result.pipeline_name), escape(result.stage_name), _format_decision(result))
    return table


def _format_decision(result: ApprovalResult) -> str:
    style = "green" if result.decision is ApprovalDecision.APPROVED else "red"
    return f"[{style}]{result.decision.value}[/]"

"""The list, run and approve workflows.

Each workflow is a plain function taking the client, the console and (for
interactive commands) a line reader. They hold no state between calls and
know nothing about the command-line layer.

Flow of an interactive command::

    list matching pipelines -> (approve) keep pipelines waiting on an action
    -> print numbered menu -> read selection -> parse -> act on each pick
    -> print results
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.markup import escape

from cph.config import DEFAULT_DATE_FORMAT
from cph.models import ApprovalDecision
from cph.render import (
    build_approval_table,
    build_execution_table,
    create_table,
    format_menu_entry,
    format_status,
    format_timestamp,
    print_line,
    print_table,
)
from cph.selection import parse_selection

if TYPE_CHECKING:
    from rich.console import Console

    from cph.client import PipelineClient
    from cph.models import ApprovalResult, Execution, ExecutionSummary, StageInfo
    from cph.prompt import LineReader

__all__ = [
    "APPROVE_PROMPT",
    "MESSAGE_PROMPT",
    "RUN_PROMPT",
    "PipelineRow",
    "approve_pipelines",
    "list_pipelines",
    "run_pipelines",
]

log = logging.getLogger(__name__)

MENU_HEADER = "\nThe following pipelines have been found:"

RUN_PROMPT = (
    "\nDo you want to run these pipelines?\n"
    "Enter 'yes' to run all, 'no' to cancel, a number for a specific pipeline, "
    "or provide a range or list: "
)

APPROVE_PROMPT = (
    "\nDo you want to approve these pipelines?\n"
    "Enter 'yes' to approve all, 'no' to cancel, 'reject' to reject all, "
    "a number for a specific pipeline, or provide a range or list: "
)

MESSAGE_PROMPT = (
    "\nDo you want to add a message? E.g. a change order number. "
    "This will apply to all pipelines (leave blank to skip): "
)


@dataclass(frozen=True, slots=True)
class PipelineRow:
    """One line of the ``list`` table."""

    name: str
    execution: ExecutionSummary | None
    stage: StageInfo | None


# ─────────────────────────────────────────────────────────────────────────────
# list
# ─────────────────────────────────────────────────────────────────────────────


def _status_cell(row: PipelineRow) -> str:
    status = format_status(row.execution.status if row.execution else None)
    if row.stage is not None:
        status += f" ({escape(row.stage.stage_name)})"
    return status


def list_pipelines(
    client: PipelineClient,
    console: Console,
    *,
    name_filter: str = "",
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[PipelineRow]:
    """Print name, status, last update and revision of matching pipelines.

    With no match, only the table header is printed.

    Args:
        client: Pipeline client.
        console: Output console.
        name_filter: Substring the pipeline names must contain.
        date_format: ``strftime`` format for the Last Update column.

    Returns:
        The rows that were printed.
    """
    rows = [
        PipelineRow(
            name=name,
            execution=client.get_latest_execution_summary(name),
            stage=client.get_active_stage(name),
        )
        for name in client.list_pipeline_names(name_filter)
    ]

    table = create_table("Name", "Status", "Last Update", "Revision")
    for row in rows:
        execution = row.execution
        table.add_row(
            escape(row.name),
            _status_cell(row),
            format_timestamp(execution.last_update_time if execution else None, date_format),
            escape((execution.revision_summary or "-").splitlines()[0]) if execution else "-",
        )
    print_table(console, table)
    return rows


# ─────────────────────────────────────────────────────────────────────────────
# run
# ─────────────────────────────────────────────────────────────────────────────


def run_pipelines(
    client: PipelineClient,
    reader: LineReader,
    console: Console,
    *,
    name_filter: str = "",
    selection: str | None = None,
) -> list[Execution]:
    """Start the pipelines the user picks from the matching ones.

    Args:
        client: Pipeline client.
        reader: Source of the user's answer.
        console: Output console.
        name_filter: Substring the pipeline names must contain.
        selection: Answer given up front; skips the prompt.

    Returns:
        Started executions, in selection order. Empty when nothing matched
        or the user cancelled.

    Raises:
        SelectionError: If the answer cannot be parsed. Nothing is started.
        RemoteCallError: On the first failing start; later picks are skipped.
    """
    names = client.list_pipeline_names(name_filter)
    if not names:
        console.print("[yellow]No pipelines found.[/]")
        return []

    console.print(MENU_HEADER)
    for index, name in enumerate(names, start=1):
        print_line(console, format_menu_entry(index, name))

    answer = selection if selection is not None else reader.read_line(RUN_PROMPT)
    picked = parse_selection(answer, len(names))
    if picked.is_cancel:
        console.print("Cancelled.")
        return []

    console.print("Running pipelines...")
    executions = client.start_executions(names[i - 1] for i in picked.indices)
    print_table(console, build_execution_table(executions))
    return executions


# ─────────────────────────────────────────────────────────────────────────────
# approve
# ─────────────────────────────────────────────────────────────────────────────


def _find_pending(client: PipelineClient, names: list[str]) -> list[tuple[str, StageInfo]]:
    pending: list[tuple[str, StageInfo]] = []
    for name in names:
        stage = client.get_active_stage(name)
        if stage is not None and stage.is_pending:
            pending.append((name, stage))
    log.debug("%d of %d pipeline(s) waiting for approval", len(pending), len(names))
    return pending


def approve_pipelines(
    client: PipelineClient,
    reader: LineReader,
    console: Console,
    *,
    name_filter: str = "",
    message: str | None = None,
    selection: str | None = None,
) -> list[ApprovalResult]:
    """Approve or reject the pending actions the user picks.

    Only pipelines whose current stage is InProgress are offered. When no
    message was supplied and the answer was read interactively, one more
    line is read as an optional message for every decision.

    Args:
        client: Pipeline client.
        reader: Source of the user's answers.
        console: Output console.
        name_filter: Substring the pipeline names must contain.
        message: Text attached to the approval summary.
        selection: Answer given up front; skips both prompts.

    Returns:
        Submitted decisions, in selection order.

    Raises:
        SelectionError: If the answer cannot be parsed. Nothing is submitted.
        RemoteCallError: On the first failing submission.
    """
    names = client.list_pipeline_names(name_filter)
    pending = _find_pending(client, names)
    if not pending:
        console.print("[yellow]No pipelines to approve.[/]")
        return []

    console.print(MENU_HEADER)
    for index, (name, stage) in enumerate(pending, start=1):
        print_line(console, format_menu_entry(index, name, stage.stage_name))

    interactive = selection is None
    answer = reader.read_line(APPROVE_PROMPT) if selection is None else selection
    picked = parse_selection(answer, len(pending), allow_reject=True)
    if picked.is_cancel:
        console.print("Cancelled.")
        return []

    if message is None:
        message = reader.read_line(MESSAGE_PROMPT) if interactive else ""

    rejecting = picked.decision is ApprovalDecision.REJECTED
    console.print("Rejecting pipelines..." if rejecting else "Approving pipelines...")
    results = client.submit_approvals((pending[i - 1] for i in picked.indices), picked.decision, message)
    print_table(console, build_approval_table(results))
    return results

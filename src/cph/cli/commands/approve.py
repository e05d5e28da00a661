"""Approve or reject pipelines waiting on a manual approval."""

from __future__ import annotations

from typing import Annotated

import typer

from cph.cli.common import NameOption, SelectOption, cli_errors, console, create_client, create_reader, get_state
from cph.orchestrators import approve_pipelines


def approve_command(
    ctx: typer.Context,
    name: NameOption = "",
    message: Annotated[
        str | None,
        typer.Option("--message", "-m", help="Add a message for the approval action (e.g. a change order)."),
    ] = None,
    select: SelectOption = None,
) -> None:
    """Approve CodePipelines based on a provided search term.

    Only pipelines whose current stage is in progress are offered. Answer
    'yes' to approve all, 'reject' to reject all, 'no' to cancel, or pick
    with a number, a range (1-3) or a list (1,3,5).

    Examples:
        # Pick interactively, then type an optional message
        cph approve --name release

        # Approve everything pending with a change order number
        cph approve --name release --message CHG-1234 --select yes
    """
    state = get_state(ctx)
    with cli_errors():
        client = create_client(state)
        approve_pipelines(
            client,
            create_reader(),
            console,
            name_filter=name,
            message=message,
            selection=select,
        )


__all__ = ["approve_command"]

"""List pipelines with their latest status."""

from __future__ import annotations

import typer

from cph.cli.common import NameOption, cli_errors, console, create_client, get_state
from cph.orchestrators import list_pipelines


def list_command(
    ctx: typer.Context,
    name: NameOption = "",
) -> None:
    """List AWS CodePipelines you have access to.

    Shows the latest execution status, the current (or last changed) stage,
    the last update time and the source revision of each pipeline.

    Examples:
        # Every pipeline
        cph list

        # Pipelines whose name contains "deploy"
        cph list --name deploy
    """
    state = get_state(ctx)
    with cli_errors():
        client = create_client(state)
        list_pipelines(client, console, name_filter=name, date_format=state.config.date_format)


__all__ = ["list_command"]

"""Start pipelines matching a search term."""

from __future__ import annotations

import typer

from cph.cli.common import NameOption, SelectOption, cli_errors, console, create_client, create_reader, get_state
from cph.orchestrators import run_pipelines


def run_command(
    ctx: typer.Context,
    name: NameOption = "",
    select: SelectOption = None,
) -> None:
    """Run CodePipelines based on a provided search term.

    Lists the matching pipelines and asks which ones to start: 'yes' for
    all, 'no' to cancel, a number, a range (1-3) or a list (1,3,5).

    Examples:
        # Pick interactively
        cph run --name deploy

        # Start the first two without prompting
        cph run --name deploy --select 1-2
    """
    state = get_state(ctx)
    with cli_errors():
        client = create_client(state)
        run_pipelines(client, create_reader(), console, name_filter=name, selection=select)


__all__ = ["run_command"]

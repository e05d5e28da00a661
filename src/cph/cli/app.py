"""Root of the cph command-line interface.

The command tree is assembled here explicitly; each subcommand maps its
parsed options onto one workflow in :mod:`cph.orchestrators`.
"""

from __future__ import annotations

from typing import Annotated

import typer

from cph import __version__
from cph.cli.commands.approve import approve_command
from cph.cli.commands.list import list_command
from cph.cli.commands.run import run_command
from cph.cli.common import CliState, exit_error
from cph.config import CONFIG_ENV_VAR, load_config
from cph.exceptions import ConfigError
from cph.logging import init_logging

__all__ = ["app", "main"]

app = typer.Typer(
    name="cph",
    help="CLI tool to interact with AWS CodePipeline: list, run and approve pipelines.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode=None,
)

app.command("list")(list_command)
app.command("run")(run_command)
app.command("approve")(approve_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cph {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    profile: Annotated[
        str | None,
        typer.Option("--profile", help="AWS profile to use (default: AWS_PROFILE, then config file)."),
    ] = None,
    region: Annotated[
        str | None,
        typer.Option("--region", help="AWS region override."),
    ] = None,
    config_path: Annotated[
        str | None,
        typer.Option("--config", envvar=CONFIG_ENV_VAR, help="Path to a cph YAML config file."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", envvar="CPH_LOG_LEVEL", help="TRACE, DEBUG, INFO, WARNING or ERROR."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """CLI tool to interact with AWS CodePipeline."""
    try:
        config = load_config(config_path)
        init_logging(log_level or config.log_level)
    except (ConfigError, ValueError) as e:
        exit_error(f"Invalid configuration: {e}")

    ctx.obj = CliState(config=config, profile=profile, region=region)


def main() -> None:
    """Console script entry point."""
    app()

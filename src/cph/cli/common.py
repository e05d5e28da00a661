"""Shared helpers for cph CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from cph.client import PipelineClient
from cph.exceptions import ConfigError, RemoteCallError, SelectionError, SessionError
from cph.prompt import LineReader

if TYPE_CHECKING:
    from cph.config import CphConfig

__all__ = [
    "NameOption",
    "SelectOption",
    "CliState",
    "cli_errors",
    "console",
    "create_client",
    "create_reader",
    "exit_error",
    "get_state",
]

console = Console(highlight=False)

NameOption = Annotated[
    str,
    typer.Option("--name", "-n", help="Use a name or part of a name to filter the pipelines."),
]

SelectOption = Annotated[
    str | None,
    typer.Option(
        "--select",
        "-s",
        help="Answer the selection prompt up front ('yes', 'no', '3', '1-3', '1,3,5').",
    ),
]


@dataclass(frozen=True, slots=True)
class CliState:
    """Options shared by every command, set by the root callback.

    Attributes:
        config: Loaded configuration.
        profile: ``--profile`` value, if given.
        region: ``--region`` value, if given.
    """

    config: CphConfig
    profile: str | None = None
    region: str | None = None


def exit_error(message: str, code: int = 1) -> NoReturn:
    """Print an error in red and exit with ``code``."""
    console.print(f"[red]{escape(message)}[/]")
    raise typer.Exit(code=code)


def get_state(ctx: typer.Context) -> CliState:
    """Return the state stored by the root callback."""
    state = ctx.obj
    if not isinstance(state, CliState):
        exit_error("CLI state not initialised.")
    return state


def create_client(state: CliState) -> PipelineClient:
    """Create the CodePipeline client for this invocation.

    Raises:
        SessionError: If the AWS session cannot be established.
    """
    config = state.config
    return PipelineClient.from_session(
        profile=config.resolve_profile(state.profile),
        region=state.region or config.region,
        timeout=config.timeout,
        page_size=config.page_size,
    )


def create_reader() -> LineReader:
    """Create a line reader prompting on the shared console."""
    return LineReader(console)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Render cph errors and map them to exit codes.

    Selection errors are reported and exit 0, since nothing was done.
    Session, remote and configuration errors exit 1.
    """
    try:
        yield
    except SelectionError as e:
        console.print(f"[yellow]{escape(str(e))}[/]")
        console.print("[dim]No action taken.[/]")
        raise typer.Exit(code=0) from e
    except (SessionError, RemoteCallError, ConfigError) as e:
        exit_error(str(e))

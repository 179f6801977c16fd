from __future__ import annotations

import typer

from relbins.cli.commands._helpers import EventOption, exit_on_error, resolve_event
from relbins.core.errors import ErrorCode
from relbins.output.console import RichConsole
from relbins.services.naming import archive_name


def name(
    bin_name: str = typer.Argument(..., metavar="BIN", help="Binary name"),
    target: str = typer.Argument(..., help="Target triple"),
) -> None:
    """Print the archive name for a binary and target."""
    try:
        typer.echo(archive_name(bin_name, target))
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def event(
    ref: str | None = typer.Option(None, "--ref", help="Pushed git ref"),
    kind: EventOption = typer.Option(EventOption.push, "--event", help="Event kind"),
    base: str | None = typer.Option(None, "--base", help="Base branch of the pull request"),
    from_env: bool = typer.Option(
        False, "--from-env", help="Read the event from GitHub Actions variables"
    ),
) -> None:
    """Print the event relbins would act on."""
    console = RichConsole()
    ev = exit_on_error(
        resolve_event(ref=ref, event=kind, base=base, from_env=from_env),
        console,
    )
    typer.echo(f"kind: {ev.kind}")
    typer.echo(f"ref: {ev.ref}")
    typer.echo(f"name: {ev.name}")

from __future__ import annotations

import os
from pathlib import Path

import typer

from relbins import __version__
from relbins.cli.commands.info_cmd import event, name
from relbins.cli.commands.run_cmd import plan, run
from relbins.core.errors import ErrorCode
from relbins.core.project import PROJECT_ROOT_ENV, is_project_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(run)
app.command()(plan)
app.command()(name)
app.command()(event)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root holding relbins.toml (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --project: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir() or not is_project_root(root):
            typer.echo(
                f"error: --project '{root}' is not a valid project (missing relbins.toml)",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[PROJECT_ROOT_ENV] = str(root)


def main() -> None:
    app()

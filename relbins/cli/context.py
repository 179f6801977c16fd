from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from relbins.core.config import Config, load_config
from relbins.core.errors import ErrorCode
from relbins.core.project import Project, detect_project
from relbins.core.result import Err
from relbins.output.console import ConsoleProtocol, RichConsole
from relbins.services.archive import TarGzArchiver
from relbins.services.build import CargoBuildExecutor
from relbins.services.runner import Collaborators
from relbins.services.upload import DirectoryArtifactStore, GhReleaseSink, InMemoryReleaseHost


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config
    console: ConsoleProtocol


def build_context() -> CLIContext:
    project_result = detect_project()
    if isinstance(project_result, Err):
        typer.echo(f"error: {project_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    project = project_result.value
    config_result = load_config(project.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(project=project, config=config_result.value, console=RichConsole())


def build_collaborators(ctx: CLIContext, *, dry_run: bool) -> Collaborators:
    """Wire the real toolchain and sinks for this project.

    With ``dry_run`` the release sink is an in-memory host, so nothing leaves
    the machine.
    """
    config = ctx.config
    releases: GhReleaseSink | InMemoryReleaseHost
    if dry_run:
        releases = InMemoryReleaseHost()
    else:
        releases = GhReleaseSink.from_config(
            project_root=ctx.project.root,
            config=config.release,
            environ=os.environ,
        )

    return Collaborators(
        executor=CargoBuildExecutor(
            project_root=ctx.project.root,
            target_dir=ctx.project.cargo_target_dir(),
            config=config.build,
        ),
        archiver=TarGzArchiver(work_dir=ctx.project.work_dir(config)),
        store=DirectoryArtifactStore(root=ctx.project.artifacts_dir(config)),
        releases=releases,
    )

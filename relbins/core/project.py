"""Project detection and paths.

A project is the root of a cargo workspace that carries a ``relbins.toml``.
Builds run from the root; work directories and stored artifacts are resolved
against it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG_FILENAME, Config
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

PROJECT_ROOT_ENV = "RELBINS_PROJECT_ROOT"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    def work_dir(self, config: Config) -> Path:
        """Per-run scratch space; each job gets its own subdirectory."""
        return self.root / config.build.work_dir

    def artifacts_dir(self, config: Config) -> Path:
        return self.root / config.artifacts.dir

    def cargo_target_dir(self) -> Path:
        """Where cross/cargo place ``<target>/release/<bin>``."""
        env_value = os.environ.get("CARGO_TARGET_DIR")
        if env_value:
            return Path(env_value)
        return self.root / "target"

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILENAME).is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start directory for a project root."""
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ROOT_ENV,
) -> Result[Project, ProjectError]:
    """Detect the project root directory.

    Detection order:
    1. RELBINS_PROJECT_ROOT environment variable (if set and valid)
    2. Search upward from start_dir (or cwd) for relbins.toml
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_project_root(env_path):
            return Ok(Project(root=env_path))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it has no {CONFIG_FILENAME}",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found:
        return Ok(Project(root=found))

    return Err(
        ProjectError(
            message=f"Could not find project ({CONFIG_FILENAME} not found)",
            searched_from=search_start,
        )
    )

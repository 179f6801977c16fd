"""Cross-compile one binary for one target.

The executor shells out to ``cross`` (or plain ``cargo``) and only knows where
the tool leaves its release output; all decisions about *which* jobs to build
live in the matrix and trigger modules.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relbins.core.config import BuildConfig, BuildTool
from relbins.core.result import Err, Ok, Result
from relbins.platform.process import run as run_process
from relbins.services.job_errors import (
    BuildError,
    BuildTimedOut,
    CompileFailed,
    OutputMissing,
    ToolMissing,
)
from relbins.services.matrix import JobSpec
from relbins.services.model import BuildOutput

_INSTALL_HINTS: dict[BuildTool, str] = {
    "cross": "Install cross: cargo install cross --locked",
    "cargo": "Install Rust: https://rustup.rs/",
}


class BuildExecutor(Protocol):
    def build(self, job: JobSpec) -> Result[BuildOutput, BuildError]: ...


def build_command(job: JobSpec, *, tool: BuildTool, locked: bool) -> list[str]:
    cmd = [tool, "build", "--bin", job.bin]
    if locked:
        cmd.append("--locked")
    cmd += ["--release", "--target", job.target]
    return cmd


def release_binary_path(target_dir: Path, job: JobSpec) -> Path:
    """Where cargo leaves the release binary for ``job``."""
    name = f"{job.bin}.exe" if job.is_windows else job.bin
    return target_dir / job.target / "release" / name


@dataclass(frozen=True, slots=True)
class CargoBuildExecutor:
    """Runs ``<tool> build --bin B [--locked] --release --target T`` in the project root."""

    project_root: Path
    target_dir: Path
    config: BuildConfig

    def ensure_tool(self) -> Result[None, ToolMissing]:
        tool = self.config.tool
        if shutil.which(tool) is None:
            return Err(ToolMissing(tool=tool, hint=_INSTALL_HINTS[tool]))
        return Ok(None)

    def build(self, job: JobSpec) -> Result[BuildOutput, BuildError]:
        available = self.ensure_tool()
        if isinstance(available, Err):
            return available

        cmd = build_command(job, tool=self.config.tool, locked=self.config.locked)
        result = run_process(cmd, cwd=self.project_root, timeout=self.config.timeout_seconds)
        if isinstance(result, Err):
            error = result.error
            if error.timed_out:
                return Err(BuildTimedOut(timeout_seconds=self.config.timeout_seconds))
            return Err(CompileFailed(returncode=error.returncode, stderr=error.stderr.strip()))

        path = release_binary_path(self.target_dir, job)
        if not path.is_file():
            return Err(OutputMissing(path=path))
        return Ok(BuildOutput(job=job, path=path))

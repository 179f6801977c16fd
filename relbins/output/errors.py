"""Error presentation utilities.

Centralized job error formatting and exit code mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relbins.core.errors import ErrorCode, worst_code
from relbins.output.console import Style
from relbins.services.job_errors import (
    BuildTimedOut,
    CompileFailed,
    JobCrashed,
    JobError,
    OutputMissing,
    PackagingFailed,
    PublishFailed,
    ToolMissing,
    UploadFailed,
)

if TYPE_CHECKING:
    from relbins.output.console import ConsoleProtocol
    from relbins.services.runner import PipelineReport

__all__ = [
    "describe_job_error",
    "print_job_error",
    "job_error_exit_code",
    "report_exit_code",
]

_STDERR_TAIL_LINES = 20


def describe_job_error(error: JobError) -> str:
    """One-line description, used in the run summary table."""
    match error:
        case ToolMissing(tool=tool):
            return f"{tool}: missing"
        case CompileFailed(returncode=rc):
            return f"build failed (exit {rc})"
        case BuildTimedOut(timeout_seconds=seconds):
            return f"build timed out after {seconds:.0f}s"
        case OutputMissing(path=path):
            return f"build output not found: {path}"
        case PackagingFailed(path=path, reason=reason):
            return f"packaging failed: {path.name} ({reason})"
        case UploadFailed(artifact=artifact, reason=reason):
            return f"artifact upload failed: {artifact} ({reason})"
        case PublishFailed(tag=tag, artifact=artifact, reason=reason):
            return f"publish to {tag} failed: {artifact} ({reason})"
        case JobCrashed(reason=reason):
            return f"job crashed: {reason}"


def print_job_error(label: str, error: JobError, console: ConsoleProtocol) -> None:
    """Print a job error with its hint or the tail of the tool's stderr."""
    console.error(f"[{label}] {describe_job_error(error)}")
    match error:
        case ToolMissing(hint=hint):
            console.print(f"hint: {hint}", Style.DIM)
        case CompileFailed(stderr=stderr) if stderr:
            for line in stderr.splitlines()[-_STDERR_TAIL_LINES:]:
                console.print(line, Style.DIM)
        case PublishFailed(hint=hint) if hint:
            console.print(f"hint: {hint}", Style.DIM)
        case _:
            pass


def job_error_exit_code(error: JobError) -> ErrorCode:
    match error:
        case ToolMissing():
            return ErrorCode.ENV_ERROR
        case CompileFailed() | BuildTimedOut() | OutputMissing() | JobCrashed():
            return ErrorCode.BUILD_ERROR
        case PackagingFailed():
            return ErrorCode.IO_ERROR
        case UploadFailed() | PublishFailed():
            return ErrorCode.NETWORK_ERROR


def report_exit_code(report: PipelineReport) -> ErrorCode:
    """Exit code of the worst job outcome (OK for skipped or all-green runs)."""
    codes = [job_error_exit_code(o.error) for o in report.outcomes if o.error is not None]
    return worst_code(codes)

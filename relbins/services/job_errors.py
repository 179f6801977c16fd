from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


# Build step


@dataclass(frozen=True, slots=True)
class ToolMissing:
    tool: str
    hint: str


@dataclass(frozen=True, slots=True)
class CompileFailed:
    returncode: int
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class BuildTimedOut:
    timeout_seconds: float


@dataclass(frozen=True, slots=True)
class OutputMissing:
    path: Path


BuildError = ToolMissing | CompileFailed | BuildTimedOut | OutputMissing


# Archive step


@dataclass(frozen=True, slots=True)
class PackagingFailed:
    path: Path
    reason: str


# Upload steps


@dataclass(frozen=True, slots=True)
class UploadFailed:
    """The artifact store rejected or could not receive the archive."""

    artifact: str
    reason: str


@dataclass(frozen=True, slots=True)
class PublishFailed:
    """The release host rejected or could not receive the archive."""

    tag: str
    artifact: str
    reason: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class JobCrashed:
    """A collaborator raised instead of returning an error value."""

    reason: str


JobError = BuildError | PackagingFailed | UploadFailed | PublishFailed | JobCrashed

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relbins.services.matrix import JobSpec


@dataclass(frozen=True, slots=True)
class BuildOutput:
    job: JobSpec
    path: Path  # release-mode binary produced by the build tool


@dataclass(frozen=True, slots=True)
class ArchiveArtifact:
    name: str  # <bin>-<target>.tar.gz
    path: Path
    size: int
    sha256: str

    @property
    def short_sha(self) -> str:
        return self.sha256[:12]

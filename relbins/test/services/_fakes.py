"""In-process stand-ins for the build toolchain used by runner and CLI tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

from relbins.core.result import Err, Ok, Result
from relbins.services.archive import TarGzArchiver
from relbins.services.job_errors import BuildError, CompileFailed
from relbins.services.matrix import JobSpec
from relbins.services.model import BuildOutput
from relbins.services.runner import Collaborators
from relbins.services.upload import InMemoryArtifactStore, InMemoryReleaseHost


@dataclass
class FakeExecutor:
    """Writes a small file per job instead of compiling.

    Jobs whose label is in ``failing`` return CompileFailed; jobs in
    ``raising`` raise RuntimeError.
    """

    out_dir: Path
    failing: set[str] = field(default_factory=set)
    raising: set[str] = field(default_factory=set)
    payload: bytes = b"\x7fELF fake binary"
    built: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def build(self, job: JobSpec) -> Result[BuildOutput, BuildError]:
        with self._lock:
            self.built.append(job.label)
        if job.label in self.raising:
            raise RuntimeError(f"toolchain exploded for {job.label}")
        if job.label in self.failing:
            return Err(CompileFailed(returncode=101, stderr="error[E0425]: cannot find value"))

        path = self.out_dir / job.target / "release" / job.bin
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.payload)
        return Ok(BuildOutput(job=job, path=path))


@dataclass
class Harness:
    executor: FakeExecutor
    store: InMemoryArtifactStore
    releases: InMemoryReleaseHost
    collaborators: Collaborators


def make_harness(
    tmp_path: Path,
    *,
    failing: set[str] | None = None,
    raising: set[str] | None = None,
) -> Harness:
    executor = FakeExecutor(
        out_dir=tmp_path / "target",
        failing=failing or set(),
        raising=raising or set(),
    )
    store = InMemoryArtifactStore()
    releases = InMemoryReleaseHost()
    collaborators = Collaborators(
        executor=executor,
        archiver=TarGzArchiver(work_dir=tmp_path / "work"),
        store=store,
        releases=releases,
    )
    return Harness(executor=executor, store=store, releases=releases, collaborators=collaborators)

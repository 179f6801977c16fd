"""Package a built binary as ``<bin>-<target>.tar.gz``.

The tarball holds the binary alone at its root, the same layout as
``tar -czf NAME -C target/<target>/release <bin>``.
"""

from __future__ import annotations

import hashlib
import os
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relbins.core.result import Err, Ok, Result
from relbins.services.job_errors import PackagingFailed
from relbins.services.model import ArchiveArtifact, BuildOutput


class Archiver(Protocol):
    def archive(
        self, output: BuildOutput, name: str
    ) -> Result[ArchiveArtifact, PackagingFailed]: ...


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


@dataclass(frozen=True, slots=True)
class TarGzArchiver:
    """Writes archives under ``work_dir/<bin>-<target>/`` (one directory per job)."""

    work_dir: Path

    def job_dir(self, output: BuildOutput) -> Path:
        return self.work_dir / output.job.label

    def archive(self, output: BuildOutput, name: str) -> Result[ArchiveArtifact, PackagingFailed]:
        dest = self.job_dir(output) / name
        tmp = dest.with_name(f".{name}.tmp")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with tarfile.open(tmp, "w:gz") as tf:
                tf.add(output.path, arcname=output.path.name)
            os.replace(tmp, dest)
            return Ok(
                ArchiveArtifact(
                    name=name,
                    path=dest,
                    size=dest.stat().st_size,
                    sha256=sha256_file(dest),
                )
            )
        except (OSError, tarfile.TarError) as e:
            tmp.unlink(missing_ok=True)
            return Err(PackagingFailed(path=dest, reason=str(e)))

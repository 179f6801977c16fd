from __future__ import annotations

import hashlib
import tarfile
from pathlib import Path

from relbins.core.result import Err, Ok
from relbins.services.archive import TarGzArchiver
from relbins.services.matrix import JobSpec
from relbins.services.model import BuildOutput

JOB = JobSpec(bin="spotter", target="x86_64-unknown-linux-musl")


def _output(tmp_path: Path, content: bytes = b"\x7fELF") -> BuildOutput:
    path = tmp_path / "target" / JOB.target / "release" / JOB.bin
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return BuildOutput(job=JOB, path=path)


def test_archive_layout_and_metadata(tmp_path: Path) -> None:
    archiver = TarGzArchiver(work_dir=tmp_path / "work")
    result = archiver.archive(_output(tmp_path), JOB.archive_name)

    assert isinstance(result, Ok)
    artifact = result.value
    assert artifact.name == "spotter-x86_64-unknown-linux-musl.tar.gz"
    assert artifact.path == tmp_path / "work" / JOB.label / artifact.name
    assert artifact.size == artifact.path.stat().st_size
    assert artifact.sha256 == hashlib.sha256(artifact.path.read_bytes()).hexdigest()

    with tarfile.open(artifact.path, "r:gz") as tf:
        assert tf.getnames() == ["spotter"]
        member = tf.extractfile("spotter")
        assert member is not None
        assert member.read() == b"\x7fELF"


def test_rearchiving_replaces_previous_file(tmp_path: Path) -> None:
    archiver = TarGzArchiver(work_dir=tmp_path / "work")
    archiver.archive(_output(tmp_path, b"one"), JOB.archive_name)
    second = archiver.archive(_output(tmp_path, b"two"), JOB.archive_name)

    assert isinstance(second, Ok)
    with tarfile.open(second.value.path, "r:gz") as tf:
        member = tf.extractfile("spotter")
        assert member is not None
        assert member.read() == b"two"
    assert [p.name for p in second.value.path.parent.iterdir()] == [JOB.archive_name]


def test_missing_binary_is_packaging_failure(tmp_path: Path) -> None:
    archiver = TarGzArchiver(work_dir=tmp_path / "work")
    output = BuildOutput(job=JOB, path=tmp_path / "nope")
    result = archiver.archive(output, JOB.archive_name)

    assert isinstance(result, Err)
    assert result.error.path.name == JOB.archive_name
    assert not (tmp_path / "work" / JOB.label / f".{JOB.archive_name}.tmp").exists()

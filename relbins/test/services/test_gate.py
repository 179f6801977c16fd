from __future__ import annotations

from pathlib import Path

from relbins.core.result import Ok
from relbins.services.gate import RELEASE_OVERWRITE, RELEASE_PRERELEASE, should_publish
from relbins.services.model import ArchiveArtifact
from relbins.services.upload import InMemoryReleaseHost, MemoryRelease

NAME = "spotter-x86_64-unknown-linux-musl.tar.gz"


def _artifact(path: Path, content: bytes) -> ArchiveArtifact:
    path.write_bytes(content)
    return ArchiveArtifact(name=NAME, path=path, size=len(content), sha256="0" * 64)


def test_gate_follows_publishable_flag(tmp_path: Path) -> None:
    artifact = _artifact(tmp_path / "a.tar.gz", b"a")
    assert should_publish(True, artifact) is True
    assert should_publish(False, artifact) is False


def test_gate_closed_without_artifact() -> None:
    assert should_publish(True, None) is False


def test_release_attributes_are_fixed() -> None:
    assert RELEASE_PRERELEASE is True
    assert RELEASE_OVERWRITE is True


def test_republishing_replaces_asset(tmp_path: Path) -> None:
    host = InMemoryReleaseHost()
    first = _artifact(tmp_path / "first.tar.gz", b"first build")
    second = _artifact(tmp_path / "second.tar.gz", b"second build")

    assert isinstance(host.publish("v1.2.0", first), Ok)
    assert isinstance(host.publish("v1.2.0", second), Ok)

    release = host.releases["v1.2.0"]
    assert list(release.assets) == [NAME]
    assert release.assets[NAME] == b"second build"
    assert release.prerelease is True


def test_existing_release_keeps_its_flags(tmp_path: Path) -> None:
    host = InMemoryReleaseHost(releases={"v1.0.0": MemoryRelease(tag="v1.0.0", prerelease=False)})
    host.publish("v1.0.0", _artifact(tmp_path / "a.tar.gz", b"a"))
    assert host.releases["v1.0.0"].prerelease is False
    assert list(host.releases["v1.0.0"].assets) == [NAME]

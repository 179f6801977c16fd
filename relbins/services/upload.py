"""Artifact and release sinks.

Every successful job stores its archive in the artifact store. Tag builds
additionally attach it to the release for the tag. Both sinks key on the
archive name, so repeating a run replaces files rather than duplicating them.
"""

from __future__ import annotations

import os
import shutil
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from relbins.core.config import ReleaseConfig
from relbins.core.result import Err, Ok, Result
from relbins.platform.process import merged_env
from relbins.services.gate import RELEASE_OVERWRITE, RELEASE_PRERELEASE
from relbins.services.gh import (
    GhContext,
    GhError,
    create_release,
    ensure_gh_available,
    upload_asset,
    view_release,
)
from relbins.services.job_errors import PublishFailed, UploadFailed
from relbins.services.model import ArchiveArtifact


class ArtifactStore(Protocol):
    def store(self, artifact: ArchiveArtifact) -> Result[None, UploadFailed]: ...


class ReleaseSink(Protocol):
    def publish(self, tag: str, artifact: ArchiveArtifact) -> Result[None, PublishFailed]: ...


# -----------------------------------------------------------------------------
# Artifact store
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DirectoryArtifactStore:
    """Keeps build artifacts in a directory, one file per archive name."""

    root: Path

    def path_for(self, name: str) -> Path:
        return self.root / name

    def store(self, artifact: ArchiveArtifact) -> Result[None, UploadFailed]:
        dest = self.path_for(artifact.name)
        tmp = dest.with_name(f".{artifact.name}.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(artifact.path, tmp)
            os.replace(tmp, dest)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            return Err(UploadFailed(artifact=artifact.name, reason=str(e)))
        return Ok(None)


@dataclass
class InMemoryArtifactStore:
    """Artifact store that keeps archive bytes in memory (tests, dry runs)."""

    files: dict[str, bytes] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def store(self, artifact: ArchiveArtifact) -> Result[None, UploadFailed]:
        try:
            data = artifact.path.read_bytes()
        except OSError as e:
            return Err(UploadFailed(artifact=artifact.name, reason=str(e)))
        with self._lock:
            self.files[artifact.name] = data
        return Ok(None)


# -----------------------------------------------------------------------------
# Release sinks
# -----------------------------------------------------------------------------


@dataclass
class MemoryRelease:
    tag: str
    prerelease: bool
    assets: dict[str, bytes] = field(default_factory=dict)


@dataclass
class InMemoryReleaseHost:
    """Release host kept in memory.

    Mirrors the behavior relbins relies on from GitHub: a missing release is
    created as pre-release, and an upload replaces an existing asset of the same
    name.
    """

    releases: dict[str, MemoryRelease] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def publish(self, tag: str, artifact: ArchiveArtifact) -> Result[None, PublishFailed]:
        try:
            data = artifact.path.read_bytes()
        except OSError as e:
            return Err(PublishFailed(tag=tag, artifact=artifact.name, reason=str(e)))

        with self._lock:
            release = self.releases.get(tag)
            if release is None:
                release = MemoryRelease(tag=tag, prerelease=RELEASE_PRERELEASE)
                self.releases[tag] = release
            release.assets[artifact.name] = data
        return Ok(None)


class GhReleaseSink:
    """Publishes to GitHub releases through the gh CLI."""

    def __init__(self, ctx: GhContext) -> None:
        self._ctx = ctx
        # Jobs of one run share a tag; only one of them should create the release.
        self._create_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        *,
        project_root: Path,
        config: ReleaseConfig,
        environ: Mapping[str, str],
    ) -> GhReleaseSink:
        token = environ.get(config.token_env)
        env = merged_env({"GH_TOKEN": token}) if token else None
        return cls(GhContext(cwd=project_root, env=env, repo=config.repo))

    @property
    def context(self) -> GhContext:
        return self._ctx

    def _ensure_release(self, tag: str) -> Result[None, GhError]:
        with self._create_lock:
            existing = view_release(self._ctx, tag)
            if isinstance(existing, Err):
                return existing
            if existing.value is not None:
                return Ok(None)
            return create_release(self._ctx, tag, prerelease=RELEASE_PRERELEASE)

    def publish(self, tag: str, artifact: ArchiveArtifact) -> Result[None, PublishFailed]:
        def fail(error: GhError) -> Err[PublishFailed]:
            return Err(
                PublishFailed(
                    tag=tag, artifact=artifact.name, reason=error.message, hint=error.hint
                )
            )

        available = ensure_gh_available()
        if isinstance(available, Err):
            return fail(available.error)

        ensured = self._ensure_release(tag)
        if isinstance(ensured, Err):
            return fail(ensured.error)

        uploaded = upload_asset(self._ctx, tag, artifact.path, clobber=RELEASE_OVERWRITE)
        if isinstance(uploaded, Err):
            return fail(uploaded.error)
        return Ok(None)

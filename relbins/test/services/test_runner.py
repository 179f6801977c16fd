from __future__ import annotations

import tarfile
from pathlib import Path

from relbins.core.config import Config, MatrixCategory, MatrixConfig
from relbins.core.result import Err, Result
from relbins.output.console import MockConsole
from relbins.services.events import Event
from relbins.services.job_errors import CompileFailed, JobCrashed, PublishFailed, UploadFailed
from relbins.services.model import ArchiveArtifact
from relbins.services.runner import Collaborators, run_pipeline
from relbins.services.trigger import TriggerKind
from ._fakes import make_harness

SPOTTER = "spotter-x86_64-unknown-linux-musl.tar.gz"


def _config(
    *,
    targets: tuple[str, ...] = ("x86_64-unknown-linux-musl",),
    bins: tuple[str, ...] = ("spotter",),
) -> Config:
    return Config(
        matrix=MatrixConfig(
            categories=(MatrixCategory(name="release-bins", targets=targets, bins=bins),)
        )
    )


class TestScenarios:
    def test_tag_push_builds_stores_and_publishes(self, tmp_path: Path) -> None:
        h = make_harness(tmp_path)
        report = run_pipeline(
            Event.tag("v1.2.0"), _config(), h.collaborators, console=MockConsole()
        )

        assert report.decision.classification == TriggerKind.TAG_PUSH
        assert len(report.outcomes) == 1
        outcome = report.outcomes[0]
        assert outcome.ok
        assert outcome.artifact is not None
        assert outcome.artifact.name == SPOTTER
        assert outcome.stored is True
        assert outcome.published is True

        assert SPOTTER in h.store.files
        release = h.releases.releases["v1.2.0"]
        assert release.prerelease is True
        assert list(release.assets) == [SPOTTER]
        assert report.succeeded

    def test_push_to_unwatched_branch_runs_nothing(self, tmp_path: Path) -> None:
        h = make_harness(tmp_path)
        console = MockConsole()
        report = run_pipeline(
            Event.push("feature/x"), _config(), h.collaborators, console=console
        )

        assert report.decision.should_run is False
        assert report.skipped
        assert report.outcomes == ()
        assert h.executor.built == []
        assert h.store.files == {}
        assert h.releases.releases == {}
        assert report.succeeded
        assert console.find("nothing to do")

    def test_push_to_master_stores_without_publishing(self, tmp_path: Path) -> None:
        h = make_harness(tmp_path)
        console = MockConsole()
        report = run_pipeline(Event.push("master"), _config(), h.collaborators, console=console)

        assert len(report.outcomes) == 1
        outcome = report.outcomes[0]
        assert outcome.ok
        assert outcome.stored is True
        assert outcome.published is None
        assert SPOTTER in h.store.files
        assert h.releases.releases == {}
        assert console.find("publish skipped")

    def test_pull_request_into_master_does_not_publish(self, tmp_path: Path) -> None:
        h = make_harness(tmp_path)
        report = run_pipeline(
            Event.pull_request("master"), _config(), h.collaborators, console=MockConsole()
        )
        assert [o.published for o in report.outcomes] == [None]
        assert h.releases.releases == {}


def test_archive_contains_only_the_binary(tmp_path: Path) -> None:
    h = make_harness(tmp_path)
    report = run_pipeline(Event.push("master"), _config(), h.collaborators, console=MockConsole())

    artifact = report.outcomes[0].artifact
    assert artifact is not None
    with tarfile.open(artifact.path, "r:gz") as tf:
        assert tf.getnames() == ["spotter"]


def test_matrix_size_is_independent_of_event(tmp_path: Path) -> None:
    config = _config(targets=("t1", "t2", "t3"), bins=("a", "b"))
    for event in (Event.push("master"), Event.tag("v1.0.0"), Event.pull_request("master")):
        h = make_harness(tmp_path / event.kind)
        report = run_pipeline(event, config, h.collaborators, console=MockConsole())
        assert len(report.outcomes) == 6
        assert sorted(h.executor.built) == sorted(
            f"{b}-{t}" for t in ("t1", "t2", "t3") for b in ("a", "b")
        )


def test_failed_build_does_not_affect_other_jobs(tmp_path: Path) -> None:
    config = _config(targets=("t1", "t2"), bins=("a",))
    h = make_harness(tmp_path, failing={"a-t1"})
    report = run_pipeline(Event.tag("v1.0.0"), config, h.collaborators, console=MockConsole())

    failed, passed = report.outcomes
    assert failed.job.label == "a-t1"
    assert isinstance(failed.error, CompileFailed)
    assert failed.failed_stage == "build"
    assert failed.stored is False

    assert passed.ok
    assert passed.published is True
    assert list(h.releases.releases["v1.0.0"].assets) == ["a-t2.tar.gz"]
    assert report.failed


def test_raising_collaborator_is_recorded_on_its_job(tmp_path: Path) -> None:
    config = _config(targets=("t1", "t2"), bins=("a",))
    h = make_harness(tmp_path, raising={"a-t2"})
    report = run_pipeline(Event.push("master"), config, h.collaborators, console=MockConsole())

    assert report.outcomes[0].ok
    assert isinstance(report.outcomes[1].error, JobCrashed)
    assert "toolchain exploded" in report.outcomes[1].error.reason


def test_outcomes_keep_matrix_order(tmp_path: Path) -> None:
    config = _config(targets=("t1", "t2", "t3", "t4"), bins=("a",))
    h = make_harness(tmp_path)
    report = run_pipeline(
        Event.push("master"), config, h.collaborators, console=MockConsole(), max_workers=4
    )
    assert [o.job.target for o in report.outcomes] == ["t1", "t2", "t3", "t4"]


class _FailingStore:
    def store(self, artifact: ArchiveArtifact) -> Result[None, UploadFailed]:
        return Err(UploadFailed(artifact=artifact.name, reason="HTTP 503"))


class _FailingReleases:
    def publish(self, tag: str, artifact: ArchiveArtifact) -> Result[None, PublishFailed]:
        return Err(PublishFailed(tag=tag, artifact=artifact.name, reason="HTTP 401"))


def test_store_failure_skips_publish(tmp_path: Path) -> None:
    h = make_harness(tmp_path)
    collaborators = Collaborators(
        executor=h.executor,
        archiver=h.collaborators.archiver,
        store=_FailingStore(),
        releases=h.releases,
    )
    report = run_pipeline(Event.tag("v1.0.0"), _config(), collaborators, console=MockConsole())

    outcome = report.outcomes[0]
    assert outcome.failed_stage == "store"
    assert outcome.stored is False
    assert outcome.published is None
    assert h.releases.releases == {}


def test_publish_failure_keeps_stored_artifact(tmp_path: Path) -> None:
    h = make_harness(tmp_path)
    collaborators = Collaborators(
        executor=h.executor,
        archiver=h.collaborators.archiver,
        store=h.store,
        releases=_FailingReleases(),
    )
    report = run_pipeline(Event.tag("v1.0.0"), _config(), collaborators, console=MockConsole())

    outcome = report.outcomes[0]
    assert outcome.failed_stage == "publish"
    assert outcome.stored is True
    assert outcome.published is False
    assert SPOTTER in h.store.files


def test_republishing_same_tag_keeps_one_asset(tmp_path: Path) -> None:
    h = make_harness(tmp_path)
    for _ in range(2):
        report = run_pipeline(
            Event.tag("v1.2.0"), _config(), h.collaborators, console=MockConsole()
        )
        assert report.succeeded

    assert list(h.releases.releases["v1.2.0"].assets) == [SPOTTER]


def test_empty_matrix_warns(tmp_path: Path) -> None:
    h = make_harness(tmp_path)
    console = MockConsole()
    report = run_pipeline(Event.push("master"), Config(), h.collaborators, console=console)
    assert report.outcomes == ()
    assert console.has_warning()


"""Pipeline orchestration.

event -> trigger decision -> (if it runs) matrix -> one independent job per
(binary, target), run in parallel. Each job is strictly sequential:

    build -> archive -> store artifact -> publish to release (tag builds only)

A failing step ends its own job and nothing else. Work a job already finished
(e.g. a stored artifact) stays in place when a later step fails.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Literal

from relbins.core.config import Config
from relbins.core.result import Err
from relbins.output.console import ConsoleProtocol
from relbins.services.archive import Archiver
from relbins.services.build import BuildExecutor
from relbins.services.events import Event
from relbins.services.gate import should_publish
from relbins.services.job_errors import JobCrashed, JobError
from relbins.services.matrix import JobSpec, expand_matrix
from relbins.services.model import ArchiveArtifact
from relbins.services.trigger import TriggerDecision, evaluate_trigger
from relbins.services.upload import ArtifactStore, ReleaseSink

JobStage = Literal["build", "archive", "store", "publish"]


@dataclass(frozen=True, slots=True)
class Collaborators:
    executor: BuildExecutor
    archiver: Archiver
    store: ArtifactStore
    releases: ReleaseSink


@dataclass(frozen=True, slots=True)
class JobOutcome:
    job: JobSpec
    artifact: ArchiveArtifact | None = None
    stored: bool = False
    # None when the publish gate was closed for this run.
    published: bool | None = None
    error: JobError | None = None
    failed_stage: JobStage | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class PipelineReport:
    event: Event
    decision: TriggerDecision
    outcomes: tuple[JobOutcome, ...] = ()

    @property
    def skipped(self) -> bool:
        return not self.decision.should_run

    @property
    def failures(self) -> tuple[JobOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    @property
    def failed(self) -> bool:
        """True if any job failed (partial success still counts as failed)."""
        return bool(self.failures)

    @property
    def succeeded(self) -> bool:
        return not self.failed


def run_job(
    job: JobSpec,
    *,
    event: Event,
    decision: TriggerDecision,
    collaborators: Collaborators,
    console: ConsoleProtocol,
) -> JobOutcome:
    console.print(f"[{job.label}] build")
    built = collaborators.executor.build(job)
    if isinstance(built, Err):
        return JobOutcome(job=job, error=built.error, failed_stage="build")

    console.print(f"[{job.label}] archive {job.archive_name}")
    archived = collaborators.archiver.archive(built.value, job.archive_name)
    if isinstance(archived, Err):
        return JobOutcome(job=job, error=archived.error, failed_stage="archive")
    artifact = archived.value

    console.print(f"[{job.label}] store artifact")
    stored = collaborators.store.store(artifact)
    if isinstance(stored, Err):
        return JobOutcome(job=job, artifact=artifact, error=stored.error, failed_stage="store")

    if not should_publish(decision.is_publishable, artifact):
        console.print(f"[{job.label}] publish skipped ({decision.classification})")
        return JobOutcome(job=job, artifact=artifact, stored=True)

    console.print(f"[{job.label}] publish to release {event.name}")
    published = collaborators.releases.publish(event.name, artifact)
    if isinstance(published, Err):
        return JobOutcome(
            job=job,
            artifact=artifact,
            stored=True,
            published=False,
            error=published.error,
            failed_stage="publish",
        )
    return JobOutcome(job=job, artifact=artifact, stored=True, published=True)


def _run_job_isolated(
    job: JobSpec,
    *,
    event: Event,
    decision: TriggerDecision,
    collaborators: Collaborators,
    console: ConsoleProtocol,
) -> JobOutcome:
    try:
        return run_job(
            job,
            event=event,
            decision=decision,
            collaborators=collaborators,
            console=console,
        )
    except Exception as e:  # noqa: BLE001 - recorded on the job outcome
        return JobOutcome(job=job, error=JobCrashed(reason=f"{type(e).__name__}: {e}"))


def run_pipeline(
    event: Event,
    config: Config,
    collaborators: Collaborators,
    *,
    console: ConsoleProtocol,
    max_workers: int | None = None,
) -> PipelineReport:
    """Evaluate the trigger and, if it matches, run every job of the matrix.

    Outcomes are returned in matrix order regardless of completion order.
    """
    decision = evaluate_trigger(event, config.trigger)
    if not decision.should_run:
        console.info(f"{event}: no watched trigger matched, nothing to do")
        return PipelineReport(event=event, decision=decision)

    jobs = expand_matrix(config.matrix)
    if not jobs:
        console.warning("matrix is empty, nothing to build")
        return PipelineReport(event=event, decision=decision)

    publish = "yes" if decision.is_publishable else "no"
    console.header(f"{event}: {len(jobs)} job(s), publish={publish}")
    workers = max_workers or config.run.max_workers or len(jobs)

    outcomes: dict[int, JobOutcome] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(
                _run_job_isolated,
                job,
                event=event,
                decision=decision,
                collaborators=collaborators,
                console=console,
            ): index
            for index, job in enumerate(jobs)
        }
        for future in as_completed(futures):
            outcomes[futures[future]] = future.result()

    return PipelineReport(
        event=event,
        decision=decision,
        outcomes=tuple(outcomes[i] for i in range(len(jobs))),
    )

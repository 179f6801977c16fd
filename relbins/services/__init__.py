"""Pipeline services.

The decision core (events, trigger, matrix, naming, gate) is pure. The build,
archive and upload modules wrap external tools behind small protocols that the
runner composes.
"""

from relbins.services.events import Event, event_from_github_env, event_from_ref
from relbins.services.gate import RELEASE_OVERWRITE, RELEASE_PRERELEASE, should_publish
from relbins.services.matrix import JobSpec, expand_matrix
from relbins.services.naming import archive_name
from relbins.services.runner import (
    Collaborators,
    JobOutcome,
    PipelineReport,
    run_job,
    run_pipeline,
)
from relbins.services.trigger import TriggerDecision, TriggerKind, evaluate_trigger

__all__ = [
    # events
    "Event",
    "event_from_github_env",
    "event_from_ref",
    # decision core
    "TriggerDecision",
    "TriggerKind",
    "evaluate_trigger",
    "JobSpec",
    "expand_matrix",
    "archive_name",
    "RELEASE_OVERWRITE",
    "RELEASE_PRERELEASE",
    "should_publish",
    # orchestration
    "Collaborators",
    "JobOutcome",
    "PipelineReport",
    "run_job",
    "run_pipeline",
]

"""Repository events that can start a pipeline run.

An ``Event`` is built once per invocation, either from an explicit git ref
(``relbins run --ref refs/tags/v1.2.0``) or from the GitHub Actions environment
(``relbins run --from-env``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from relbins.core.result import Err, Ok, Result

# "other" covers events relbins does not react to (workflow_dispatch, schedule, ...).
EventKind = Literal["push", "pull_request", "tag", "other"]

BRANCH_REF_PREFIX = "refs/heads/"
TAG_REF_PREFIX = "refs/tags/"


@dataclass(frozen=True, slots=True)
class Event:
    """A repository event.

    ``name`` is the pushed branch, the pull request's base branch, or the tag.
    """

    kind: EventKind
    ref: str
    name: str

    @classmethod
    def push(cls, branch: str) -> Event:
        return cls(kind="push", ref=f"{BRANCH_REF_PREFIX}{branch}", name=branch)

    @classmethod
    def tag(cls, tag: str) -> Event:
        return cls(kind="tag", ref=f"{TAG_REF_PREFIX}{tag}", name=tag)

    @classmethod
    def pull_request(cls, base: str, ref: str | None = None) -> Event:
        return cls(kind="pull_request", ref=ref or f"{BRANCH_REF_PREFIX}{base}", name=base)

    def __str__(self) -> str:
        match self.kind:
            case "push":
                return f"push to {self.name}"
            case "pull_request":
                return f"pull request into {self.name}"
            case "tag":
                return f"tag {self.name}"
            case _:
                return f"{self.name} event ({self.ref or 'no ref'})"


@dataclass(frozen=True, slots=True)
class EventError:
    message: str
    hint: str | None = None


def event_from_ref(ref: str) -> Result[Event, EventError]:
    """Classify a pushed ref as a branch push or a tag push."""
    ref = ref.strip()
    if ref.startswith(TAG_REF_PREFIX):
        name = ref.removeprefix(TAG_REF_PREFIX)
        if name:
            return Ok(Event(kind="tag", ref=ref, name=name))
    elif ref.startswith(BRANCH_REF_PREFIX):
        name = ref.removeprefix(BRANCH_REF_PREFIX)
        if name:
            return Ok(Event(kind="push", ref=ref, name=name))

    return Err(
        EventError(
            message=f"unsupported ref: '{ref}'",
            hint="expected refs/heads/<branch> or refs/tags/<tag>",
        )
    )


def event_from_github_env(env: Mapping[str, str]) -> Result[Event, EventError]:
    """Build an Event from GitHub Actions variables.

    Uses GITHUB_EVENT_NAME, GITHUB_REF and, for pull requests, GITHUB_BASE_REF.
    Any other event name becomes an "other" event, which never runs the pipeline.
    """
    event_name = env.get("GITHUB_EVENT_NAME", "").strip()
    ref = env.get("GITHUB_REF", "").strip()

    if not event_name:
        return Err(EventError(message="GITHUB_EVENT_NAME is not set", hint="use --ref instead"))

    if event_name in ("pull_request", "pull_request_target"):
        base = env.get("GITHUB_BASE_REF", "").strip()
        if not base:
            return Err(EventError(message="GITHUB_BASE_REF is not set for a pull request event"))
        return Ok(Event.pull_request(base, ref=ref or None))

    if event_name == "push":
        if not ref:
            return Err(EventError(message="GITHUB_REF is not set for a push event"))
        pushed = event_from_ref(ref)
        if isinstance(pushed, Ok):
            return pushed
        return Ok(Event(kind="other", ref=ref, name=event_name))

    return Ok(Event(kind="other", ref=ref, name=event_name))

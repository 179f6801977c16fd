"""Decide whether an event runs the pipeline and whether it may publish."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase

from relbins.core.config import TriggerConfig
from relbins.services.events import TAG_REF_PREFIX, Event


class TriggerKind(Enum):
    PUSH_TO_WATCHED_BRANCH = "push"
    PULL_REQUEST_TO_WATCHED_BRANCH = "pull_request"
    TAG_PUSH = "tag"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TriggerDecision:
    classification: TriggerKind
    should_run: bool
    is_publishable: bool

    def __post_init__(self) -> None:
        if self.is_publishable and not self.should_run:
            raise ValueError("a publishable decision must also run")


_SKIP = TriggerDecision(classification=TriggerKind.OTHER, should_run=False, is_publishable=False)


def matches_any(name: str, patterns: tuple[str, ...]) -> bool:
    """Case-sensitive glob match against any pattern."""
    return any(fnmatchcase(name, p) for p in patterns)


def evaluate_trigger(event: Event, config: TriggerConfig) -> TriggerDecision:
    """Classify ``event`` against the configured watch-lists.

    Only a tag push whose tag matches a tag pattern is publishable.
    """
    match event.kind:
        case "push" if matches_any(event.name, config.branches):
            return TriggerDecision(
                classification=TriggerKind.PUSH_TO_WATCHED_BRANCH,
                should_run=True,
                is_publishable=False,
            )
        case "pull_request" if matches_any(event.name, config.pull_request_branches):
            return TriggerDecision(
                classification=TriggerKind.PULL_REQUEST_TO_WATCHED_BRANCH,
                should_run=True,
                is_publishable=False,
            )
        case "tag" if event.ref.startswith(TAG_REF_PREFIX) and matches_any(
            event.name, config.tags
        ):
            return TriggerDecision(
                classification=TriggerKind.TAG_PUSH,
                should_run=True,
                is_publishable=True,
            )
        case _:
            return _SKIP

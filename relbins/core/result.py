"""Result type for explicit error handling.

Every pipeline step (build, archive, store, publish) returns a Result instead of
raising, so a failing job can be recorded and the remaining jobs keep going.

Usage:
    match executor.build(job):
        case Ok(output):
            archive(output)
        case Err(error):
            report(error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful step, carrying its value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed step, carrying its error."""

    error: E


Result = Union[Ok[T], Err[E]]

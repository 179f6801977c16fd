"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from enum import Enum
from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from relbins.core.errors import ErrorCode
from relbins.core.result import Err, Ok, Result
from relbins.output.console import Style
from relbins.services.events import Event, EventError, event_from_github_env, event_from_ref

if TYPE_CHECKING:
    from relbins.output.console import ConsoleProtocol


T = TypeVar("T")
E = TypeVar("E")


class EventOption(str, Enum):
    push = "push"
    pull_request = "pull_request"


def exit_on_error(
    result: Result[T, E],
    console: ConsoleProtocol,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or print the error and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        console.error(message)
        if hint:
            console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def resolve_event(
    *,
    ref: str | None,
    event: EventOption,
    base: str | None,
    from_env: bool,
) -> Result[Event, EventError]:
    """Build the triggering event from CLI options.

    --from-env reads the GitHub Actions environment and ignores the other
    options. A pull request needs --base; a push needs --ref.
    """
    if from_env:
        return event_from_github_env(os.environ)

    if event == EventOption.pull_request:
        if not base:
            return Err(EventError(message="--base is required for a pull_request event"))
        return Ok(Event.pull_request(base, ref=ref))

    if not ref:
        return Err(
            EventError(
                message="--ref is required",
                hint="e.g. --ref refs/heads/master or --ref refs/tags/v1.2.0, or use --from-env",
            )
        )
    return event_from_ref(ref)

from __future__ import annotations

import typer

from relbins.cli.commands._helpers import EventOption, exit_on_error, exit_with_code, resolve_event
from relbins.cli.context import build_collaborators, build_context
from relbins.core.errors import ErrorCode
from relbins.output.console import ConsoleProtocol, Style
from relbins.output.errors import describe_job_error, print_job_error, report_exit_code
from relbins.services.gate import RELEASE_OVERWRITE, RELEASE_PRERELEASE
from relbins.services.matrix import expand_matrix
from relbins.services.runner import JobOutcome, PipelineReport, run_pipeline
from relbins.services.trigger import evaluate_trigger


def _published_cell(outcome: JobOutcome) -> str:
    if outcome.published is None:
        return "skipped"
    return "yes" if outcome.published else "no"


def _print_report(report: PipelineReport, console: ConsoleProtocol) -> None:
    if report.skipped or not report.outcomes:
        return

    rows: list[list[str]] = []
    for outcome in report.outcomes:
        rows.append(
            [
                outcome.job.label,
                outcome.artifact.name if outcome.artifact else "-",
                outcome.artifact.short_sha if outcome.artifact else "-",
                "yes" if outcome.stored else "no",
                _published_cell(outcome),
                "ok" if outcome.error is None else describe_job_error(outcome.error),
            ]
        )
    console.newline()
    console.table("Jobs", ["job", "archive", "sha256", "stored", "published", "result"], rows)

    for outcome in report.failures:
        if outcome.error is not None:
            print_job_error(outcome.job.label, outcome.error, console)

    total = len(report.outcomes)
    failed = len(report.failures)
    if failed:
        console.error(f"{failed}/{total} job(s) failed")
    else:
        console.success(f"{total} job(s) succeeded")


def run(
    ref: str | None = typer.Option(
        None, "--ref", help="Pushed git ref (refs/heads/<branch> or refs/tags/<tag>)"
    ),
    event: EventOption = typer.Option(EventOption.push, "--event", help="Event kind"),
    base: str | None = typer.Option(
        None, "--base", help="Base branch of the pull request (with --event pull_request)"
    ),
    from_env: bool = typer.Option(
        False, "--from-env", help="Read the event from GitHub Actions variables"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build and store locally, publish to an in-memory release"
    ),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Max parallel jobs"),
) -> None:
    """Build, package and (for v* tags) publish every binary in the matrix."""
    ctx = build_context()
    resolved = resolve_event(ref=ref, event=event, base=base, from_env=from_env)
    ev = exit_on_error(resolved, ctx.console)

    report = run_pipeline(
        ev,
        ctx.config,
        build_collaborators(ctx, dry_run=dry_run),
        console=ctx.console,
        max_workers=jobs,
    )
    _print_report(report, ctx.console)

    code = report_exit_code(report)
    if code != ErrorCode.OK:
        exit_with_code(int(code))


def plan(
    ref: str | None = typer.Option(
        None, "--ref", help="Pushed git ref (refs/heads/<branch> or refs/tags/<tag>)"
    ),
    event: EventOption = typer.Option(EventOption.push, "--event", help="Event kind"),
    base: str | None = typer.Option(
        None, "--base", help="Base branch of the pull request (with --event pull_request)"
    ),
    from_env: bool = typer.Option(
        False, "--from-env", help="Read the event from GitHub Actions variables"
    ),
) -> None:
    """Show what a run would do for an event, without building anything."""
    ctx = build_context()
    resolved = resolve_event(ref=ref, event=event, base=base, from_env=from_env)
    ev = exit_on_error(resolved, ctx.console)

    decision = evaluate_trigger(ev, ctx.config.trigger)
    ctx.console.header(str(ev))
    ctx.console.print(f"trigger: {decision.classification}")
    ctx.console.print(f"run: {'yes' if decision.should_run else 'no'}")
    ctx.console.print(f"publish: {'yes' if decision.is_publishable else 'no'}")
    if not decision.should_run:
        return

    jobs = expand_matrix(ctx.config.matrix)
    if not jobs:
        ctx.console.warning("matrix is empty")
        return

    rows = [[job.category, job.bin, job.target, job.archive_name] for job in jobs]
    ctx.console.newline()
    ctx.console.table("Matrix", ["category", "bin", "target", "archive"], rows)
    if decision.is_publishable:
        ctx.console.print(
            f"assets will be attached to release {ev.name} "
            f"(prerelease={RELEASE_PRERELEASE}, overwrite={RELEASE_OVERWRITE})",
            Style.DIM,
        )

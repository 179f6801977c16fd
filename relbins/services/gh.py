from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import Literal

from relbins.core.result import Err, Ok, Result
from relbins.core.structured import as_str_dict, get_list, get_str
from relbins.platform.process import ProcessError
from relbins.platform.process import run as run_process
from relbins.services.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)

GhErrorKind = Literal[
    "gh_missing",
    "gh_auth_required",
    "invalid_response",
    "request_failed",
]


@dataclass(frozen=True, slots=True)
class GhError:
    kind: GhErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class GhRelease:
    tag: str
    prerelease: bool
    assets: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class GhContext:
    """Where and as whom gh runs.

    ``env`` carries the token (GH_TOKEN) when one is configured; ``repo`` is
    passed as ``--repo`` when set.
    """

    cwd: Path
    env: dict[str, str] | None = None
    repo: str | None = None

    def repo_args(self) -> list[str]:
        return ["--repo", self.repo] if self.repo else []


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    if error.timed_out:
        return True
    return any(marker in text for marker in markers)


def _is_auth_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return "gh auth login" in text or "http 401" in text or "bad credentials" in text


def _failure(error: ProcessError, message: str) -> GhError:
    if _is_auth_error(error):
        return GhError(
            kind="gh_auth_required",
            message=message,
            hint="Set the release token env var or run: gh auth login",
        )
    return GhError(kind="request_failed", message=message, hint=error.stderr.strip() or None)


def run_gh_read(
    ctx: GhContext,
    cmd: list[str],
    *,
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ProcessError]:
    """Run an idempotent gh command, retrying transient failures."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=ctx.cwd, env=ctx.env, timeout=timeout)
        if isinstance(result, Ok):
            return result
        if attempt < attempts - 1 and _is_transient_gh_error(result.error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        return result

    return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=message))


def ensure_gh_available() -> Result[None, GhError]:
    if shutil.which("gh") is None:
        return Err(
            GhError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def view_release(ctx: GhContext, tag: str) -> Result[GhRelease | None, GhError]:
    """Fetch a release by tag; Ok(None) if it does not exist."""
    cmd = ["gh", "release", "view", tag, *ctx.repo_args(), "--json", "tagName,isPrerelease,assets"]
    result = run_gh_read(ctx, cmd, message=f"failed to query release {tag}")
    if isinstance(result, Err):
        if "release not found" in result.error.stderr.lower():
            return Ok(None)
        return Err(_failure(result.error, f"failed to query release {tag}"))

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(
            GhError(kind="invalid_response", message=f"invalid JSON from gh release view: {e}")
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(GhError(kind="invalid_response", message="unexpected gh release view payload"))

    prerelease = data.get("isPrerelease")
    assets: list[str] = []
    for item in get_list(data, "assets") or []:
        asset = as_str_dict(item)
        if asset is None:
            continue
        name = get_str(asset, "name")
        if name is not None:
            assets.append(name)

    return Ok(
        GhRelease(
            tag=get_str(data, "tagName") or tag,
            prerelease=prerelease if isinstance(prerelease, bool) else False,
            assets=tuple(assets),
        )
    )


def create_release(ctx: GhContext, tag: str, *, prerelease: bool) -> Result[None, GhError]:
    """Create a release for an existing tag.

    Losing a creation race to a concurrent job is not an error.
    """
    cmd = ["gh", "release", "create", tag, *ctx.repo_args(), "--verify-tag", "--title", tag]
    cmd += ["--notes", ""]
    if prerelease:
        cmd.append("--prerelease")

    result = run_process(cmd, cwd=ctx.cwd, env=ctx.env, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        if "already exists" in result.error.stderr.lower():
            return Ok(None)
        return Err(_failure(result.error, f"failed to create release {tag}"))
    return Ok(None)


def upload_asset(
    ctx: GhContext,
    tag: str,
    path: Path,
    *,
    clobber: bool,
) -> Result[None, GhError]:
    """Attach ``path`` to the release; ``clobber`` replaces a same-named asset."""
    cmd = ["gh", "release", "upload", tag, str(path), *ctx.repo_args()]
    if clobber:
        cmd.append("--clobber")

    result = run_process(cmd, cwd=ctx.cwd, env=ctx.env, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(_failure(result.error, f"failed to upload {path.name} to release {tag}"))
    return Ok(None)

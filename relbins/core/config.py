"""Typed loading of ``relbins.toml``.

Example:

    [trigger]
    branches = ["master"]
    tags = ["v*"]

    [matrix.release-bins]
    targets = ["x86_64-unknown-linux-musl"]
    bins = ["spotter"]

    [release]
    repo = "owner/spotter"
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypeVar

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

T = TypeVar("T")

__all__ = [
    "ArtifactsConfig",
    "BuildConfig",
    "BuildTool",
    "Config",
    "ConfigError",
    "MatrixCategory",
    "MatrixConfig",
    "ReleaseConfig",
    "RunConfig",
    "TriggerConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILENAME",
]

CONFIG_FILENAME = "relbins.toml"

DEFAULT_BRANCHES: tuple[str, ...] = ("master",)
DEFAULT_TAG_PATTERNS: tuple[str, ...] = ("v*",)
DEFAULT_BUILD_TIMEOUT_SECONDS = 60 * 60.0
DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"

BuildTool = Literal["cross", "cargo"]
_BUILD_TOOLS: tuple[BuildTool, ...] = ("cross", "cargo")
_FIXED_RELEASE_KEYS = ("prerelease", "overwrite")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class TriggerConfig:
    """Which repository events start a run.

    All entries are glob patterns, matched the way GitHub branch/tag filters are.
    """

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    pull_request_branches: tuple[str, ...] = DEFAULT_BRANCHES
    tags: tuple[str, ...] = DEFAULT_TAG_PATTERNS


@dataclass(frozen=True, slots=True)
class MatrixCategory:
    """One logical job group, e.g. ``release-bins``.

    Jobs are the product of ``targets`` x ``bins`` (targets outer) followed by
    the explicit ``include`` pairs.
    """

    name: str
    targets: tuple[str, ...] = ()
    bins: tuple[str, ...] = ()
    include: tuple[tuple[str, str], ...] = ()

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """Ordered, de-duplicated ``(bin, target)`` pairs."""
        seen: set[tuple[str, str]] = set()
        out: list[tuple[str, str]] = []
        product = [(b, t) for t in self.targets for b in self.bins]
        for pair in (*product, *self.include):
            if pair in seen:
                continue
            seen.add(pair)
            out.append(pair)
        return tuple(out)


@dataclass(frozen=True, slots=True)
class MatrixConfig:
    categories: tuple[MatrixCategory, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildConfig:
    tool: BuildTool = "cross"
    locked: bool = True
    timeout_seconds: float = DEFAULT_BUILD_TIMEOUT_SECONDS
    # Relative to the project root.
    work_dir: str = ".relbins/work"


@dataclass(frozen=True, slots=True)
class ArtifactsConfig:
    dir: str = "artifacts"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release host settings.

    ``repo`` is ``owner/name``; when unset, gh resolves it from the checkout.
    ``token_env`` names the environment variable holding the credential; the
    value is handed to gh untouched.
    """

    repo: str | None = None
    token_env: str = DEFAULT_TOKEN_ENV


@dataclass(frozen=True, slots=True)
class RunConfig:
    # None means one worker per job.
    max_workers: int | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    trigger: TriggerConfig = field(default_factory=TriggerConfig)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    artifacts: ArtifactsConfig = field(default_factory=ArtifactsConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    run: RunConfig = field(default_factory=RunConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a value has the wrong shape.
        """
        trigger = _section(data, "trigger")
        matrix = _section(data, "matrix")
        build = _section(data, "build")
        artifacts = _section(data, "artifacts")
        release = _section(data, "release")
        run = _section(data, "run")

        # An explicit empty list disables that trigger; only a missing key
        # falls back to the default.
        branches = _str_tuple(trigger, "branches", "trigger")
        if branches is None:
            branches = DEFAULT_BRANCHES
        pull_request_branches = _str_tuple(trigger, "pull_request_branches", "trigger")
        if pull_request_branches is None:
            pull_request_branches = branches
        tags = _str_tuple(trigger, "tags", "trigger")
        if tags is None:
            tags = DEFAULT_TAG_PATTERNS

        tool = _expect(build, "tool", get_str, "a non-empty string", "build") or "cross"
        if tool not in _BUILD_TOOLS:
            raise ValueError(f"build.tool must be one of {', '.join(_BUILD_TOOLS)}, got '{tool}'")

        max_workers = _expect(run, "max_workers", get_int, "an integer", "run")
        if max_workers is not None and max_workers < 1:
            raise ValueError("run.max_workers must be >= 1")

        timeout = _expect(build, "timeout_seconds", get_float, "a number", "build")
        if timeout is not None and timeout <= 0:
            raise ValueError("build.timeout_seconds must be > 0")

        locked = _expect(build, "locked", get_bool, "a boolean", "build")
        work_dir = _expect(build, "work_dir", get_str, "a non-empty string", "build")
        artifacts_dir = _expect(artifacts, "dir", get_str, "a non-empty string", "artifacts")
        repo = _expect(release, "repo", get_str, "a non-empty string", "release")
        token_env = _expect(release, "token_env", get_str, "a non-empty string", "release")
        for key in _FIXED_RELEASE_KEYS:
            if key in release:
                raise ValueError(
                    f"release.{key} is not configurable: releases are created as "
                    "pre-release and republished assets replace same-named ones"
                )

        return cls(
            trigger=TriggerConfig(
                branches=branches,
                pull_request_branches=pull_request_branches,
                tags=tags,
            ),
            matrix=_parse_matrix(matrix),
            build=BuildConfig(
                tool="cargo" if tool == "cargo" else "cross",
                locked=True if locked is None else locked,
                timeout_seconds=timeout or DEFAULT_BUILD_TIMEOUT_SECONDS,
                work_dir=work_dir or ".relbins/work",
            ),
            artifacts=ArtifactsConfig(dir=artifacts_dir or "artifacts"),
            release=ReleaseConfig(repo=repo, token_env=token_env or DEFAULT_TOKEN_ENV),
            run=RunConfig(max_workers=max_workers),
        )


def _section(data: Mapping[str, object], name: str) -> StrDict:
    if name not in data:
        return {}
    table = get_table(data, name)
    if table is None:
        raise ValueError(f"[{name}] must be a table")
    return table


def _expect(
    table: Mapping[str, object],
    key: str,
    getter: Callable[[Mapping[str, object], str], T | None],
    kind: str,
    section: str,
) -> T | None:
    """Read ``key`` with ``getter``; a present value of the wrong type is an error."""
    if key not in table:
        return None
    value = getter(table, key)
    if value is None:
        raise ValueError(f"{section}.{key} must be {kind}")
    return value


def _str_tuple(table: Mapping[str, object], key: str, section: str) -> tuple[str, ...] | None:
    values = _expect(table, key, get_str_list, "a list of strings", section)
    if values is None:
        return None
    return tuple(values)


def _check_name(kind: str, value: str, category: str) -> str:
    if "/" in value or "\\" in value:
        raise ValueError(f"matrix.{category}: {kind} '{value}' must not contain a path separator")
    return value


def _parse_matrix(matrix: StrDict) -> MatrixConfig:
    categories: list[MatrixCategory] = []
    owner: dict[tuple[str, str], str] = {}

    for name, raw in matrix.items():
        table = as_str_dict(raw)
        if table is None:
            raise ValueError(f"matrix.{name} must be a table")

        section = f"matrix.{name}"
        targets = tuple(
            _check_name("target", t, name) for t in _str_tuple(table, "targets", section) or ()
        )
        bins = tuple(_check_name("bin", b, name) for b in _str_tuple(table, "bins", section) or ())

        include: list[tuple[str, str]] = []
        for item in _expect(table, "include", get_list, "a list of tables", section) or []:
            entry = as_str_dict(item)
            if entry is None:
                raise ValueError(f"matrix.{name}.include entries must be tables")
            bin_name = get_str(entry, "bin")
            target = get_str(entry, "target")
            if bin_name is None or target is None:
                raise ValueError(f"matrix.{name}.include entries need 'bin' and 'target'")
            include.append(
                (_check_name("bin", bin_name, name), _check_name("target", target, name))
            )

        category = MatrixCategory(name=name, targets=targets, bins=bins, include=tuple(include))

        # Archive names are derived from (bin, target) alone, so a pair declared
        # twice would make two jobs fight over one asset.
        for pair in category.pairs:
            previous = owner.get(pair)
            if previous is not None:
                raise ValueError(
                    f"job {pair[0]}-{pair[1]} is declared in both matrix.{previous} "
                    f"and matrix.{name}"
                )
            owner[pair] = name

        categories.append(category)

    return MatrixConfig(categories=tuple(categories))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relbins.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return the default config if it can't be read."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()

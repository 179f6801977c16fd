from __future__ import annotations

ARCHIVE_SUFFIX = ".tar.gz"


def archive_name(bin_name: str, target: str) -> str:
    """Deterministic asset name for one (binary, target) build.

    The same name is used for the stored build artifact and the release asset,
    so republishing a tag replaces the asset instead of adding a second one.
    """
    for label, value in (("binary name", bin_name), ("target", target)):
        if not value:
            raise ValueError(f"{label} must not be empty")
        if "/" in value or "\\" in value:
            raise ValueError(f"{label} must not contain a path separator: {value!r}")
    return f"{bin_name}-{target}{ARCHIVE_SUFFIX}"

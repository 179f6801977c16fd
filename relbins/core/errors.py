"""Exit codes for the relbins CLI.

A pipeline run exits with the code of its worst job outcome, so the values
double as a severity scale (see ``ErrorCode.severity``).
"""

from enum import IntEnum

__all__ = ["ErrorCode", "worst_code"]


class ErrorCode(IntEnum):
    """Process exit codes.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including runs skipped because the trigger did not match)
    - 1: User error (bad config, bad arguments)
    - 2: Environment error (missing toolchain, missing gh)
    - 3: Build error (cross/cargo failed)
    - 4: Network error (artifact store or release host failed)
    - 5: I/O error (packaging failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK

    @property
    def severity(self) -> int:
        """Rank used to pick the worst outcome of a run (higher is worse)."""
        return _SEVERITY[self]


_SEVERITY: dict[ErrorCode, int] = {
    ErrorCode.OK: 0,
    ErrorCode.NETWORK_ERROR: 1,
    ErrorCode.IO_ERROR: 2,
    ErrorCode.BUILD_ERROR: 3,
    ErrorCode.ENV_ERROR: 4,
    ErrorCode.USER_ERROR: 5,
}


def worst_code(codes: list[ErrorCode]) -> ErrorCode:
    """Return the most severe code, or OK for an empty list."""
    if not codes:
        return ErrorCode.OK
    return max(codes, key=lambda c: c.severity)

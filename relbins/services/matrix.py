"""Static build matrix: one independent job per configured (binary, target) pair."""

from __future__ import annotations

from dataclasses import dataclass

from relbins.core.config import MatrixConfig
from relbins.services.naming import archive_name


@dataclass(frozen=True, slots=True)
class JobSpec:
    bin: str
    target: str
    category: str = ""

    @property
    def archive_name(self) -> str:
        return archive_name(self.bin, self.target)

    @property
    def label(self) -> str:
        return f"{self.bin}-{self.target}"

    @property
    def is_windows(self) -> bool:
        return "windows" in self.target


def expand_matrix(matrix: MatrixConfig) -> tuple[JobSpec, ...]:
    """Flatten the configured categories into jobs, in declaration order.

    The matrix is static configuration: the triggering event plays no part.
    """
    return tuple(
        JobSpec(bin=bin_name, target=target, category=category.name)
        for category in matrix.categories
        for bin_name, target in category.pairs
    )

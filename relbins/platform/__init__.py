"""Platform layer: subprocess execution."""

from .process import ProcessError, merged_env, run

__all__ = ["ProcessError", "merged_env", "run"]

"""relbins: cross-compile, package and publish release binaries."""

__version__ = "0.1.0"

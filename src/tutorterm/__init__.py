"""tutorterm - interactive terminal and git tutor."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tutorterm")
except PackageNotFoundError:
    __version__ = "0+unknown"

__all__ = ["__version__"]

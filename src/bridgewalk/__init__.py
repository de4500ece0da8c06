"""
bridgewalk distribution import namespace.

This package re-exports the core `journey_engine` package for convenience.
"""

from importlib.metadata import PackageNotFoundError, version

# src/bridgewalk/__init__.py
from journey_engine import *  # noqa: F401,F403
from journey_engine import __all__ as _engine_all

try:
    __version__ = version("bridgewalk")
except PackageNotFoundError:  # pragma: no cover - source tree without an installed distribution
    __version__ = "0+unknown"

__all__ = ["__version__", *_engine_all]

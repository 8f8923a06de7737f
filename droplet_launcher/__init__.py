"""
Lightweight package init.

Exports:
    __version__ : best-effort package version (falls back to "0+unknown")
    Launcher    : one launch attempt, see :mod:`droplet_launcher.controller`
    LaunchError : base class of every fatal launch condition
"""

from __future__ import annotations

from importlib.metadata import version as _pkg_version

from .controller import Launcher
from .errors import LaunchError

__all__ = ["__version__", "LaunchError", "Launcher"]


def _detect_version() -> str:
    try:
        return _pkg_version("droplet-launcher")
    except Exception:
        return "0+unknown"


__version__ = _detect_version()

"""Minimal logging setup for the launcher.

* ``setup_logging`` attaches a single stderr handler to the root logger.
* ``resolve_level`` maps ``LAUNCHER_LOG_LEVEL`` onto a :mod:`logging` level.

The launcher runs as the first process of a container, so there is no log
directory to write to; stderr is captured by the platform's log pipeline.
Everything below WARNING is silent unless explicitly requested.
"""

from __future__ import annotations

import logging
import sys
from typing import Mapping, Optional, TextIO

from .config import LOG_LEVEL_ENV

__all__ = ["reset_logging", "resolve_level", "setup_logging"]

_DEFAULT_LEVEL = logging.WARNING
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False
_handler: Optional[logging.Handler] = None
_previous_level: Optional[int] = None


def resolve_level(env: Mapping[str, str], *, level_env: str = LOG_LEVEL_ENV) -> int:
    name = (env.get(level_env) or "").strip().upper()
    if not name:
        return _DEFAULT_LEVEL
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else _DEFAULT_LEVEL


def setup_logging(
    env: Mapping[str, str],
    *,
    stream: Optional[TextIO] = None,
    level_env: str = LOG_LEVEL_ENV,
) -> int:
    """
    Configure the root logger once and return the effective level.

    Repeated calls keep the first handler and only return the current level.
    """
    global _configured, _handler, _previous_level

    root = logging.getLogger()
    if _configured:
        return root.level
    _previous_level = root.level

    level = resolve_level(env, level_env=level_env)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))

    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    _handler = handler
    _configured = True
    return level


def reset_logging() -> None:
    """Drop the handler installed by :func:`setup_logging`."""
    global _configured, _handler, _previous_level
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    if _previous_level is not None:
        root.setLevel(_previous_level)
    _previous_level = None
    _handler = None
    _configured = False

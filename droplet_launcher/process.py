"""
Final hand-off: replace the launcher with the droplet's start command.

:class:`Handoff` is the terminal state of a launch.  Executing it never
returns on success; the exec primitive is injectable so tests (or a platform
without ``execve``) can substitute spawn-and-wait behaviour.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, NoReturn

from .config import BASH, PROFILE_WRAPPER
from .errors import ProcessReplacementFailed

__all__ = ["ExecFn", "Handoff", "limit_to_single_thread", "wrapper_argv"]

_LOG = logging.getLogger(__name__)

ExecFn = Callable[[str, List[str], Dict[str, str]], object]


def wrapper_argv(prog: str, app_dir: str, command: str) -> List[str]:
    """argv for bash: source the profile scripts in *app_dir*, then exec *command*."""
    return ["bash", "-c", PROFILE_WRAPPER, prog, app_dir, command]


def limit_to_single_thread() -> int:
    """
    Check the launcher is down to its main thread before exec.

    Threads other than the caller vanish on exec; any still alive are
    reported.  Returns the number of live threads.
    """
    alive = threading.enumerate()
    if len(alive) > 1:
        names = ", ".join(t.name for t in alive if t is not threading.current_thread())
        _LOG.warning("%d extra thread(s) alive at hand-off: %s", len(alive) - 1, names)
    return len(alive)


def _flush_streams() -> None:
    for handler in logging.getLogger().handlers:
        try:
            handler.flush()
        except Exception:
            pass
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except Exception:
            pass


@dataclass
class Handoff:
    app_dir: str
    command: str
    env: Mapping[str, str]
    prog: str = "launcher"
    executable: str = BASH
    exec_fn: ExecFn = field(default=os.execve, repr=False)

    @property
    def argv(self) -> List[str]:
        return wrapper_argv(self.prog, self.app_dir, self.command)

    def execute(self) -> NoReturn:
        """
        Become the start command.

        ``exec_fn`` replacing the process means this never returns.  If it
        raises, or returns at all, :class:`ProcessReplacementFailed` is raised.
        """
        env = dict(self.env)
        _LOG.debug("exec %s in %s", self.executable, self.app_dir)
        _flush_streams()
        try:
            self.exec_fn(self.executable, self.argv, env)
        except OSError as exc:
            raise ProcessReplacementFailed(f"{self.prog}: unable to exec {self.executable}: {exc}") from exc
        raise ProcessReplacementFailed(f"{self.prog}: exec of {self.executable} returned")

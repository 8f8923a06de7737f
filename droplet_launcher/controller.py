"""
Launch orchestration.

:class:`Launcher` runs the launch steps in their fixed order and applies
:data:`POLICY` to each result: a failed ``FAIL_OPEN`` step is logged and
skipped, a failed ``FAIL_CLOSED`` step aborts with its
:class:`~droplet_launcher.errors.LaunchError`.  A successful run ends in a
:class:`~droplet_launcher.process.Handoff`.
"""

from __future__ import annotations

import enum
import logging
import os
from typing import Callable, Dict, List, MutableMapping, NoReturn, Optional, Sequence

from .config import MIN_ARGS, STAGING_INFO_FILE
from .credhub import CredHubClient
from .environment import (
    StepResult,
    augment_vcap_application,
    resolve_app_dir,
    set_deps_dir,
    set_home,
    set_tmpdir,
)
from .errors import InsufficientArguments, LaunchError, NoStartCommand
from .interpolation import ClientFactory, interpolate_services
from .platform_options import PlatformOptions, decode_platform_options
from .process import ExecFn, Handoff, limit_to_single_thread
from .start_command import resolve_start_command

__all__ = ["FAIL_CLOSED", "FAIL_OPEN", "Launcher", "POLICY", "Policy", "usage"]

_LOG = logging.getLogger(__name__)


class Policy(enum.Enum):
    FAIL_OPEN = "fail-open"
    FAIL_CLOSED = "fail-closed"


FAIL_OPEN = Policy.FAIL_OPEN
FAIL_CLOSED = Policy.FAIL_CLOSED

# Every step name used with Launcher._apply must appear here.
POLICY: Dict[str, Policy] = {
    "resolve_app_dir": FAIL_OPEN,
    "set_home": FAIL_OPEN,
    "set_tmpdir": FAIL_OPEN,
    "set_deps_dir": FAIL_OPEN,
    "augment_vcap_application": FAIL_OPEN,
    "resolve_start_command": FAIL_CLOSED,
    "decode_platform_options": FAIL_CLOSED,
    "interpolate_services": FAIL_CLOSED,
    "limit_to_single_thread": FAIL_OPEN,
}


def usage(prog: str) -> str:
    return f"Usage: {prog} <app-directory> <start-command> <metadata> [<platform-options>]"


class Launcher:
    """
    One launch attempt.

    Parameters
    ----------
    args:
        Positional arguments after the program name.
    env:
        Environment to build on; mutated in place and handed to the droplet.
    prog:
        Program name used in messages and as ``$0`` of the bash wrapper.
    staging_info_path:
        Location of the staging metadata, relative to the working directory.
    client_factory / exec_fn:
        Seams for the CredHub client and the exec primitive.
    """

    def __init__(
        self,
        args: Sequence[str],
        env: MutableMapping[str, str],
        *,
        prog: str = "launcher",
        staging_info_path: str = STAGING_INFO_FILE,
        client_factory: ClientFactory = CredHubClient,
        exec_fn: Optional[ExecFn] = None,
    ) -> None:
        self.args = list(args)
        self.env = env
        self.prog = prog
        self.staging_info_path = staging_info_path
        self.client_factory = client_factory
        self.exec_fn = exec_fn if exec_fn is not None else os.execve
        self.results: List[StepResult] = []

    # ── policy ───────────────────────────────────────────────────────────
    def _apply(self, name: str, step: Callable[[], StepResult]) -> StepResult:
        try:
            result = step()
        except LaunchError as exc:
            result = StepResult.failure(name, exc)
        self.results.append(result)
        if result.ok:
            return result
        if POLICY[name] is FAIL_CLOSED:
            if isinstance(result.error, LaunchError):
                raise result.error
            raise LaunchError(f"{name}: {result.error}")
        _LOG.debug("step %s failed open: %s", name, result.error)
        return result

    # ── steps ────────────────────────────────────────────────────────────
    def _check_args(self) -> None:
        if len(self.args) < MIN_ARGS:
            raise InsufficientArguments(
                f"{self.prog}: received only {len(self.args)} arguments\n{usage(self.prog)}"
            )

    def _build_environment(self, app_dir: str) -> str:
        resolved = self._apply("resolve_app_dir", lambda: resolve_app_dir(app_dir))
        directory = str(resolved.value)
        self._apply("set_home", lambda: set_home(self.env, directory))
        self._apply("set_tmpdir", lambda: set_tmpdir(self.env, directory))
        self._apply("set_deps_dir", lambda: set_deps_dir(self.env, directory))
        self._apply("augment_vcap_application", lambda: augment_vcap_application(self.env))
        return directory

    def _resolve_command(self, explicit: str) -> str:
        result = self._apply(
            "resolve_start_command",
            lambda: StepResult.success(
                "resolve_start_command",
                resolve_start_command(explicit, self.staging_info_path),
            ),
        )
        command = str(result.value or "")
        if not command:
            raise NoStartCommand(f"{self.prog}: no start command specified or detected in droplet")
        return command

    def _platform_options(self) -> Optional[PlatformOptions]:
        encoded = self.args[3] if len(self.args) > 3 else None
        result = self._apply(
            "decode_platform_options",
            lambda: StepResult.success("decode_platform_options", decode_platform_options(encoded)),
        )
        return result.value

    def _interpolate(self, options: Optional[PlatformOptions]) -> None:
        self._apply(
            "interpolate_services",
            lambda: StepResult.success(
                "interpolate_services",
                interpolate_services(self.env, options, client_factory=self.client_factory),
            ),
        )

    # ── public API ───────────────────────────────────────────────────────
    def prepare(self) -> Handoff:
        """Run every step and return the terminal hand-off without executing it."""
        self._check_args()
        app_dir, start_command = self.args[0], self.args[1]
        # args[2] is the instance metadata blob; accepted but not consumed.

        directory = self._build_environment(app_dir)
        command = self._resolve_command(start_command)
        options = self._platform_options()
        self._interpolate(options)
        self._apply(
            "limit_to_single_thread",
            lambda: StepResult.success("limit_to_single_thread", limit_to_single_thread()),
        )
        return Handoff(
            app_dir=directory,
            command=command,
            env=self.env,
            prog=self.prog,
            exec_fn=self.exec_fn,
        )

    def run(self) -> NoReturn:
        """Prepare and become the start command; only returns by raising."""
        self.prepare().execute()

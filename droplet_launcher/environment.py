"""
Environment construction for the droplet process.

Every step works on an explicitly passed mapping (normally a copy of
``os.environ``) and reports a :class:`StepResult` instead of raising.  Whether
a failed step aborts the launch is decided by the controller's policy table,
not here.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Optional

from .config import (
    DEPS_DIR,
    HOME,
    INSTANCE_GUID,
    INSTANCE_INDEX,
    LISTEN_ALL_HOST,
    PORT,
    TMPDIR,
    VCAP_APPLICATION,
)

__all__ = [
    "StepResult",
    "augment_vcap_application",
    "parse_int",
    "resolve_app_dir",
    "set_deps_dir",
    "set_home",
    "set_tmpdir",
]

_INT_RE = re.compile(r"[+-]?[0-9]+")

Env = MutableMapping[str, str]


@dataclass
class StepResult:
    name: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, name: str, value: Any = None) -> "StepResult":
        return cls(name=name, ok=True, value=value)

    @classmethod
    def failure(cls, name: str, error: BaseException) -> "StepResult":
        return cls(name=name, ok=False, error=error)


def parse_int(text: Optional[str]) -> Optional[int]:
    """Strict decimal parse: optional sign, ASCII digits, nothing else."""
    if not text or not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _abspath(*parts: str) -> str:
    # Raises OSError when the working directory no longer exists.
    return os.path.abspath(os.path.join(*parts))


def resolve_app_dir(app_dir: str) -> StepResult:
    """Absolute form of *app_dir*; on failure the original value rides along."""
    try:
        return StepResult.success("resolve_app_dir", _abspath(app_dir))
    except OSError as exc:
        result = StepResult.failure("resolve_app_dir", exc)
        result.value = app_dir
        return result


def set_home(env: Env, app_dir: str) -> StepResult:
    env[HOME] = app_dir
    return StepResult.success("set_home", app_dir)


def _set_sibling(env: Env, name: str, key: str, app_dir: str, sibling: str) -> StepResult:
    try:
        path = _abspath(app_dir, "..", sibling)
    except OSError as exc:
        return StepResult.failure(name, exc)
    env[key] = path
    return StepResult.success(name, path)


def set_tmpdir(env: Env, app_dir: str) -> StepResult:
    return _set_sibling(env, "set_tmpdir", TMPDIR, app_dir, "tmp")


def set_deps_dir(env: Env, app_dir: str) -> StepResult:
    return _set_sibling(env, "set_deps_dir", DEPS_DIR, app_dir, "deps")


def _decode_object(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        raise ValueError(f"{VCAP_APPLICATION} is not set")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"{VCAP_APPLICATION} is not a JSON object")
    return data


def augment_vcap_application(env: Env) -> StepResult:
    """
    Add runtime-assigned fields to the application descriptor.

    ``host`` and ``instance_id`` are always written; ``port`` and
    ``instance_index`` only when their source variables are integers.  Other
    keys are preserved, and re-running overwrites rather than duplicates.
    """
    name = "augment_vcap_application"
    try:
        descriptor = _decode_object(env.get(VCAP_APPLICATION))
    except (ValueError, RecursionError) as exc:
        return StepResult.failure(name, exc)

    descriptor["host"] = LISTEN_ALL_HOST
    descriptor["instance_id"] = env.get(INSTANCE_GUID, "")

    port = parse_int(env.get(PORT))
    if port is not None:
        descriptor["port"] = port

    index = parse_int(env.get(INSTANCE_INDEX))
    if index is not None:
        descriptor["instance_index"] = index

    try:
        encoded = json.dumps(descriptor, separators=(",", ":"), sort_keys=True, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        return StepResult.failure(name, exc)

    env[VCAP_APPLICATION] = encoded
    return StepResult.success(name, descriptor)


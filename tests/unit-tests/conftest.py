# tests/unit-tests/conftest.py
from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from droplet_launcher.logging_config import reset_logging


class RecordingExec:
    """Stand-in for ``os.execve`` that records the call instead of replacing us."""

    def __init__(self, *, raise_exit: bool = False) -> None:
        self.calls: List[Tuple[str, List[str], Dict[str, str]]] = []
        self.raise_exit = raise_exit

    def __call__(self, executable: str, argv: List[str], env: Dict[str, str]) -> None:
        self.calls.append((executable, list(argv), dict(env)))
        if self.raise_exit:
            raise SystemExit(0)


def encode_options(payload: object) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


@pytest.fixture
def recording_exec() -> RecordingExec:
    return RecordingExec()


@pytest.fixture
def launch_env() -> Dict[str, str]:
    """A container-like environment, independent of the test process."""
    return {
        "PATH": "/usr/bin:/bin",
        "VCAP_APPLICATION": json.dumps({"foo": "bar"}),
        "VCAP_SERVICES": json.dumps({"db": [{"credentials": {"credhub-ref": "/c/db"}}]}),
        "PORT": "8080",
        "INSTANCE_INDEX": "2",
        "INSTANCE_GUID": "abc",
    }


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory so no stray staging_info.yml is seen."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()

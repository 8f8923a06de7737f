from __future__ import annotations

import json
import os

import pytest
from typer.testing import CliRunner

from droplet_launcher.cli import app

from conftest import RecordingExec, encode_options

runner = CliRunner()


@pytest.fixture
def container_env(monkeypatch, workdir):
    """Point the real process environment at a throwaway container layout."""
    for key in ("HOME", "TMPDIR", "DEPS_DIR", "CF_INSTANCE_CERT", "CF_INSTANCE_KEY", "LAUNCHER_LOG_LEVEL"):
        # setenv registers the key for teardown
        monkeypatch.setenv(key, "unset")
        monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", "/root-home")
    monkeypatch.setenv("VCAP_APPLICATION", json.dumps({"name": "web"}))
    monkeypatch.setenv("VCAP_SERVICES", "{}")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("INSTANCE_INDEX", "0")
    monkeypatch.setenv("INSTANCE_GUID", "guid-1")
    fake = RecordingExec(raise_exit=True)
    monkeypatch.setattr(os, "execve", fake)
    return fake


def test_successful_launch_execs_bash(container_env):
    result = runner.invoke(app, ["/home/vcap/app", "bundle exec rails server", "{}"])

    assert result.exit_code == 0, result.output
    (executable, argv, env) = container_env.calls[0]
    assert executable == "/bin/bash"
    assert argv[-2:] == ["/home/vcap/app", "bundle exec rails server"]
    assert env["HOME"] == "/home/vcap/app"
    assert env["TMPDIR"] == "/home/vcap/tmp"
    assert json.loads(env["VCAP_APPLICATION"])["instance_id"] == "guid-1"


def test_start_command_may_look_like_an_option(container_env):
    result = runner.invoke(app, ["/home/vcap/app", "--version", "{}"])
    assert result.exit_code == 0, result.output
    assert container_env.calls[0][1][-1] == "--version"


@pytest.mark.parametrize("args", [[], ["/home/vcap/app"], ["/home/vcap/app", "./run"]])
def test_insufficient_arguments_exit_status(container_env, args):
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "received only" in result.output
    assert os.environ["HOME"] == "/root-home"
    assert container_env.calls == []


def test_no_start_command_exit_status(container_env):
    result = runner.invoke(app, ["/home/vcap/app", "", "{}"])
    assert result.exit_code == 2
    assert "no start command" in result.output


def test_invalid_platform_options_exit_status(container_env):
    result = runner.invoke(app, ["/home/vcap/app", "./run", "{}", "!!"])
    assert result.exit_code == 3
    assert "Invalid platform options" in result.output


def test_missing_credentials_exit_status(container_env):
    opts = encode_options({"credhub_uri": "https://credhub.example:8844"})
    result = runner.invoke(app, ["/home/vcap/app", "./run", "{}", opts])
    assert result.exit_code == 6
    assert "CF_INSTANCE_CERT" in result.output
    assert container_env.calls == []


def test_unusable_certificate_exit_status(container_env, tmp_path, monkeypatch):
    monkeypatch.setenv("CF_INSTANCE_CERT", str(tmp_path / "missing.crt"))
    monkeypatch.setenv("CF_INSTANCE_KEY", str(tmp_path / "missing.key"))
    opts = encode_options({"credhub_uri": "https://credhub.example:8844"})
    result = runner.invoke(app, ["/home/vcap/app", "./run", "{}", opts])
    assert result.exit_code == 4
    assert "Unable to set up credhub client" in result.output


def test_failed_exec_exit_status(container_env, monkeypatch):
    monkeypatch.setattr(os, "execve", RecordingExec())
    result = runner.invoke(app, ["/home/vcap/app", "./run", "{}"])
    assert result.exit_code == 8

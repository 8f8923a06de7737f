"""
Names and constants shared by the launcher.

Everything the launcher reads from or writes to the container environment is
declared here so the rest of the package never spells a variable name twice.
"""

from __future__ import annotations

# ── environment consumed ────────────────────────────────────────────────
VCAP_APPLICATION = "VCAP_APPLICATION"
VCAP_SERVICES = "VCAP_SERVICES"
INSTANCE_GUID = "INSTANCE_GUID"
PORT = "PORT"
INSTANCE_INDEX = "INSTANCE_INDEX"
CF_INSTANCE_CERT = "CF_INSTANCE_CERT"
CF_INSTANCE_KEY = "CF_INSTANCE_KEY"
CF_SYSTEM_CERT_PATH = "CF_SYSTEM_CERT_PATH"
LOG_LEVEL_ENV = "LAUNCHER_LOG_LEVEL"

# ── environment produced ────────────────────────────────────────────────
HOME = "HOME"
TMPDIR = "TMPDIR"
DEPS_DIR = "DEPS_DIR"

# Bind address written into VCAP_APPLICATION["host"].
LISTEN_ALL_HOST = "0.0.0.0"

# Relative to the working directory the launcher is started in.
STAGING_INFO_FILE = "staging_info.yml"

INTERPOLATE_PATH = "/api/v1/interpolate"

MIN_ARGS = 3

BASH = "/bin/bash"

# Sourced by bash before the start command replaces it.  $1 is the app
# directory, everything after it is the command line.
PROFILE_WRAPPER = """
cd "$1"

if [ -n "$(ls ../profile.d/* 2> /dev/null)" ]; then
  for env_file in ../profile.d/*; do
    source $env_file
  done
fi

if [ -n "$(ls .profile.d/* 2> /dev/null)" ]; then
  for env_file in .profile.d/*; do
    source $env_file
  done
fi

if [ -f .profile ]; then
  source .profile
fi

shift

exec bash -c "$@"
"""

__all__ = [
    "BASH",
    "CF_INSTANCE_CERT",
    "CF_INSTANCE_KEY",
    "CF_SYSTEM_CERT_PATH",
    "DEPS_DIR",
    "HOME",
    "INSTANCE_GUID",
    "INSTANCE_INDEX",
    "INTERPOLATE_PATH",
    "LISTEN_ALL_HOST",
    "LOG_LEVEL_ENV",
    "MIN_ARGS",
    "PORT",
    "PROFILE_WRAPPER",
    "STAGING_INFO_FILE",
    "TMPDIR",
    "VCAP_APPLICATION",
    "VCAP_SERVICES",
]

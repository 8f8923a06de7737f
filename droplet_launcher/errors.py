"""
Fatal launch conditions.

Each subclass owns a distinct process exit status so an orchestrator can tell
failures apart without parsing stderr.
"""

from __future__ import annotations


class LaunchError(Exception):
    """Base class for every condition that aborts the launch."""

    exit_code: int = 70

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InsufficientArguments(LaunchError):
    exit_code = 1


class NoStartCommand(LaunchError):
    exit_code = 2


class InvalidPlatformOptions(LaunchError):
    exit_code = 3


class SecretClientInitFailed(LaunchError):
    exit_code = 4


class SecretInterpolationFailed(LaunchError):
    exit_code = 5


class MissingClientCredentials(LaunchError):
    exit_code = 6


class StagingInfoInvalid(LaunchError):
    exit_code = 7


class ProcessReplacementFailed(LaunchError):
    exit_code = 8


__all__ = [
    "InsufficientArguments",
    "InvalidPlatformOptions",
    "LaunchError",
    "MissingClientCredentials",
    "NoStartCommand",
    "ProcessReplacementFailed",
    "SecretClientInitFailed",
    "SecretInterpolationFailed",
    "StagingInfoInvalid",
]

"""Resolve the command line the droplet should be started with."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .config import STAGING_INFO_FILE
from .errors import StagingInfoInvalid

__all__ = ["StagingInfo", "read_staging_info", "resolve_start_command"]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagingInfo:
    start_command: str = ""


def _coerce_command(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise StagingInfoInvalid(f"Invalid staging info - start_command must be a string, got {type(value).__name__}")


def read_staging_info(path: Union[str, Path] = STAGING_INFO_FILE) -> Optional[StagingInfo]:
    """
    Load *path* as staging metadata.

    Returns ``None`` when the file does not exist.  Any other read failure or a
    document that is not a YAML mapping raises :class:`StagingInfoInvalid`.
    """
    target = Path(path)
    try:
        raw = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOG.debug("no staging info at %s", target)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise StagingInfoInvalid(f"Invalid staging info - {exc}") from exc

    try:
        # BaseLoader keeps every scalar as its source text ("true", "0x10").
        data = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise StagingInfoInvalid("Invalid staging info - invalid YAML") from exc

    if data is None:
        return StagingInfo()
    if not isinstance(data, dict):
        raise StagingInfoInvalid("Invalid staging info - invalid YAML")
    return StagingInfo(start_command=_coerce_command(data.get("start_command")))


def resolve_start_command(
    explicit: str,
    staging_info_path: Union[str, Path] = STAGING_INFO_FILE,
) -> str:
    """
    Return *explicit* when it is non-empty, else the staging file's command.

    The result may be empty; deciding that an empty command is fatal is left
    to the caller.
    """
    if explicit:
        return explicit
    info = read_staging_info(staging_info_path)
    if info is None:
        return ""
    _LOG.debug("start command taken from %s", staging_info_path)
    return info.start_command

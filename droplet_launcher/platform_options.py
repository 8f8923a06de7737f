"""Decode the base64 JSON platform-options argument."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidPlatformOptions

__all__ = ["PlatformOptions", "decode_platform_options"]


@dataclass(frozen=True)
class PlatformOptions:
    credhub_uri: str = ""


def decode_platform_options(encoded: Optional[str]) -> Optional[PlatformOptions]:
    """
    Return the decoded options, or ``None`` when the argument is missing/empty.

    Unknown keys are ignored.  Bad base64, bad JSON, a non-object document or
    a non-string ``credhub_uri`` raise :class:`InvalidPlatformOptions`.
    """
    if not encoded:
        return None
    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPlatformOptions(f"Invalid platform options: {exc}") from exc

    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise InvalidPlatformOptions(f"Invalid platform options: {exc}") from exc
    if data is None:
        return PlatformOptions()
    if not isinstance(data, dict):
        raise InvalidPlatformOptions("Invalid platform options: expected a JSON object")

    uri = data.get("credhub_uri")
    if uri is None:
        uri = ""
    if not isinstance(uri, str):
        raise InvalidPlatformOptions("Invalid platform options: credhub_uri must be a string")
    return PlatformOptions(credhub_uri=uri)

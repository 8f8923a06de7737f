"""Resolve CredHub references inside ``VCAP_SERVICES``."""

from __future__ import annotations

import logging
from typing import Callable, MutableMapping, Optional

from .config import CF_INSTANCE_CERT, CF_INSTANCE_KEY, CF_SYSTEM_CERT_PATH, VCAP_SERVICES
from .credhub import CredHubClient, CredHubError
from .errors import MissingClientCredentials, SecretClientInitFailed, SecretInterpolationFailed
from .platform_options import PlatformOptions

__all__ = ["ClientFactory", "interpolate_services"]

_LOG = logging.getLogger(__name__)

ClientFactory = Callable[..., CredHubClient]


def interpolate_services(
    env: MutableMapping[str, str],
    options: Optional[PlatformOptions],
    *,
    client_factory: ClientFactory = CredHubClient,
) -> bool:
    """
    Rewrite ``env[VCAP_SERVICES]`` with secrets resolved by CredHub.

    Returns ``False`` without touching *env* when no CredHub URI is
    configured, ``True`` after a successful rewrite.  Every failure raises the
    matching :class:`~droplet_launcher.errors.LaunchError`.
    """
    if options is None or not options.credhub_uri:
        return False

    cert = env.get(CF_INSTANCE_CERT, "")
    key = env.get(CF_INSTANCE_KEY, "")
    if not cert or not key:
        raise MissingClientCredentials(f"Missing {CF_INSTANCE_CERT} and/or {CF_INSTANCE_KEY}")

    try:
        client = client_factory(
            options.credhub_uri,
            cert,
            key,
            ca_dir=env.get(CF_SYSTEM_CERT_PATH) or None,
        )
    except CredHubError as exc:
        raise SecretClientInitFailed(f"Unable to set up credhub client: {exc}") from exc

    try:
        interpolated = client.interpolate_string(env.get(VCAP_SERVICES, ""))
    except CredHubError as exc:
        raise SecretInterpolationFailed(f"Unable to interpolate credhub references: {exc}") from exc

    env[VCAP_SERVICES] = interpolated
    _LOG.debug("%s interpolated via %s", VCAP_SERVICES, options.credhub_uri)
    return True

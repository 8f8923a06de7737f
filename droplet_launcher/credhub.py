"""
Minimal CredHub client: mutual-TLS ``POST /api/v1/interpolate``.

Only the single call the launcher needs is implemented.  The request blocks
until the server answers; there is deliberately no timeout or retry.
"""

from __future__ import annotations

import http.client
import json
import logging
import ssl
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any, Optional

from .config import INTERPOLATE_PATH

__all__ = ["CredHubClient", "CredHubError"]

_LOG = logging.getLogger(__name__)


class CredHubError(Exception):
    """Raised for any client construction or request failure."""


def _client_context(cert_path: str, key_path: str, ca_dir: Optional[str]) -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.load_cert_chain(certfile=cert_path, keyfile=key_path)
    if ca_dir:
        root = Path(ca_dir)
        if root.is_dir():
            for cert in sorted(root.glob("*.crt")):
                ctx.load_verify_locations(cafile=str(cert))
    return ctx


def _error_message(body: bytes) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return body.decode("utf-8", errors="replace").strip()
    if isinstance(data, dict):
        for key in ("error_description", "error"):
            value = data.get(key)
            if value:
                return str(value)
    return json.dumps(data)


class CredHubClient:
    """
    CredHub API client authenticated with the instance identity certificate.

    Parameters
    ----------
    base_url:
        ``https://host[:port]`` of the CredHub server.
    cert_path / key_path:
        PEM files presented as the TLS client certificate.
    ca_dir:
        Optional directory of ``*.crt`` files trusted in addition to the
        system store.
    opener:
        ``urllib`` opener override; built from the TLS context when omitted.
    """

    def __init__(
        self,
        base_url: str,
        cert_path: str,
        key_path: str,
        *,
        ca_dir: Optional[str] = None,
        opener: Optional[urllib.request.OpenerDirector] = None,
    ) -> None:
        parsed = urllib.parse.urlparse(base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise CredHubError(f"invalid CredHub URI {base_url!r}")
        self.base_url = base_url.rstrip("/")

        if opener is None:
            try:
                ctx = _client_context(cert_path, key_path, ca_dir)
            except (OSError, ssl.SSLError) as exc:
                raise CredHubError(f"unable to load client certificate: {exc}") from exc
            opener = urllib.request.build_opener(urllib.request.HTTPSHandler(context=ctx))
        self._opener = opener

    def _post(self, path: str, payload: Any) -> bytes:
        url = self.base_url + path
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            method="POST",
        )
        _LOG.debug("POST %s", url)
        try:
            with self._opener.open(req) as resp:
                return resp.read()
        except urllib.error.HTTPError as exc:
            try:
                detail = _error_message(exc.read() or b"")
            except (OSError, http.client.HTTPException):
                detail = ""
            raise CredHubError(f"{exc.code} {detail or exc.reason}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise CredHubError(str(getattr(exc, "reason", exc))) from exc
        except http.client.HTTPException as exc:
            raise CredHubError(f"{type(exc).__name__}: {exc}") from exc

    def interpolate_string(self, services: str) -> str:
        """
        Resolve every ``credhub-ref`` inside the *services* JSON document.

        The document must decode as a JSON object (or ``null``); the
        server's response body is returned verbatim.
        """
        try:
            body = json.loads(services)
        except (ValueError, RecursionError) as exc:
            raise CredHubError(f"services document is not valid JSON: {exc}") from exc
        if body is not None and not isinstance(body, dict):
            raise CredHubError(f"services document must be a JSON object, got {type(body).__name__}")
        raw = self._post(INTERPOLATE_PATH, body)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CredHubError(f"response is not UTF-8: {exc}") from exc

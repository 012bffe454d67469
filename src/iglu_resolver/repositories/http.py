# -----------------------------------------------------------------------------
# HTTP repository: a remote Iglu registry reached with a plain GET.
#
#   GET {uri}/schemas/{vendor}/{name}/{format}/{version}
#   apikey: <api key>            (only when configured)
#
# The implementation uses only the Python standard library (`urllib.request`).
# Unit tests are expected to *mock* the internal `_get()` method so that no
# real HTTP calls are made during CI.
#
# Outcome classification
# ----------------------
#   404                       -> Ok(None)
#   other 4xx                 -> Err(ClientFailure)
#   5xx                       -> Err(ServerFailure)
#   refused / DNS / timeout   -> Err(ConnectionFailed)
#   body is not a JSON object -> Err(ParseFailure)
#   2xx with a JSON object    -> Ok(schema)
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from iglu_resolver.core.errors import (
    ClientFailure,
    ConnectionFailed,
    ParseFailure,
    ServerFailure,
)
from iglu_resolver.core.result import err, ok
from iglu_resolver.core.schema_key import SchemaKey, to_path
from iglu_resolver.core.settings import get_logger, load_settings

from .base import LookupResult, RepositoryRef
from .config import RepositoryRefConfig

log = get_logger(__name__)


def _default_connect_timeout() -> float:
    return load_settings().http_connect_timeout


def _default_read_timeout() -> float:
    return load_settings().http_read_timeout


@dataclass(frozen=True)
class HttpRepositoryRef(RepositoryRef):
    """Repository backed by a remote Iglu registry.

    Parameters
    ----------
    config:
        Shared repository metadata.
    uri:
        Registry base URL, e.g. ``"http://iglucentral.com"``.
    api_key:
        Optional key sent in the ``apikey`` header for private registries.
    connect_timeout / read_timeout:
        Seconds before a hanging registry is reported as ``ConnectionFailed``.
        ``urllib`` applies a single socket timeout to both phases, so the
        larger of the two is used.
    """

    class_priority: ClassVar[int] = 100
    descriptor: ClassVar[str] = "HTTP"

    config: RepositoryRefConfig
    uri: str
    api_key: str | None = field(default=None, repr=False)
    connect_timeout: float = field(default_factory=_default_connect_timeout)
    read_timeout: float = field(default_factory=_default_read_timeout)

    def lookup_schema(self, key: SchemaKey) -> LookupResult:
        url = to_path(self.uri, key)
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key

        log.debug("HTTP lookup of %s at %s", key, url)
        try:
            raw = self._get(url=url, headers=headers)
        except urllib.error.HTTPError as exc:
            return self._classify_status(exc.code, str(exc.reason), url)
        except (urllib.error.URLError, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            return err(ConnectionFailed(f"{url}: {reason}"))

        try:
            document = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            return err(ParseFailure(f"Problem parsing response of {url} as JSON: {exc}"))

        if not isinstance(document, dict):
            return err(ParseFailure(f"Response of {url} is not a JSON object"))
        return ok(document)

    @staticmethod
    def _classify_status(status: int, reason: str, url: str) -> LookupResult:
        if status == 404:
            return ok(None)
        if 400 <= status < 500:
            return err(ClientFailure(f"HTTP {status} {reason} from {url}"))
        if status >= 500:
            return err(ServerFailure(f"HTTP {status} {reason} from {url}"))
        return err(ClientFailure(f"Unexpected HTTP {status} {reason} from {url}"))

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _get(self, *, url: str, headers: Mapping[str, str]) -> bytes:
        """Perform an HTTP GET and return the raw body.

        Raises ``urllib.error.HTTPError`` for non-2xx answers and
        ``urllib.error.URLError`` / ``OSError`` for transport failures; the
        caller classifies both.
        """
        request = urllib.request.Request(url=url, headers=dict(headers), method="GET")
        timeout = max(self.connect_timeout, self.read_timeout)
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            body: bytes = resp.read()
        return body


__all__ = ["HttpRepositoryRef"]

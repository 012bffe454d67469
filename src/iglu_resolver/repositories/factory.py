"""Build repository refs from configuration descriptors.

A descriptor is one entry of the resolver configuration's ``repositories``
array::

    {
      "name": "Iglu Central",
      "priority": 0,
      "vendorPrefixes": ["com.snowplowanalytics"],
      "connection": {"http": {"uri": "http://iglucentral.com"}}
    }

The ``connection`` object is sniffed: ``embedded`` and ``http`` are the two
supported kinds.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import RepositoryRef
from .config import RepositoryRefConfig
from .embedded import EmbeddedRepositoryRef
from .http import HttpRepositoryRef

#: Name of the repository bundled with this package.
BOOTSTRAP_NAME = "Iglu Client Embedded"

#: Always-available repository holding the meta-schemas this package needs
#: (self-describing envelope, resolver configuration).
BOOTSTRAP_REPOSITORY = EmbeddedRepositoryRef(
    config=RepositoryRefConfig(
        name=BOOTSTRAP_NAME,
        instance_priority=0,
        vendor_prefixes=("com.snowplowanalytics",),
    ),
    path="/iglu-client-embedded",
)


def _connection(descriptor: Mapping[str, Any]) -> Mapping[str, Any]:
    connection = descriptor.get("connection")
    if not isinstance(connection, Mapping):
        raise ValueError(f"Repository {descriptor.get('name')!r} has no 'connection' object")
    return connection


def is_embedded(descriptor: Mapping[str, Any]) -> bool:
    return isinstance(_connection(descriptor).get("embedded"), Mapping)


def is_http(descriptor: Mapping[str, Any]) -> bool:
    return isinstance(_connection(descriptor).get("http"), Mapping)


def parse_repository_ref(descriptor: Mapping[str, Any]) -> RepositoryRef:
    """Return the repository ref described by ``descriptor``.

    Raises
    ------
    ValueError
        If the connection kind is unknown or a required field is missing
        (pydantic's ``ValidationError`` is a ``ValueError`` too).
    """
    config = RepositoryRefConfig.parse(descriptor)
    connection = _connection(descriptor)

    if is_embedded(descriptor):
        path = connection["embedded"].get("path")
        if not isinstance(path, str):
            raise ValueError(f"Could not extract connection.embedded.path for {config.name!r}")
        return EmbeddedRepositoryRef(config=config, path=path)

    if is_http(descriptor):
        http = connection["http"]
        uri = http.get("uri")
        if not isinstance(uri, str):
            raise ValueError(f"Could not extract connection.http.uri for {config.name!r}")
        timeouts: dict[str, float] = {}
        if "connectTimeout" in http:
            timeouts["connect_timeout"] = float(http["connectTimeout"])
        if "readTimeout" in http:
            timeouts["read_timeout"] = float(http["readTimeout"])
        return HttpRepositoryRef(config=config, uri=uri, api_key=http.get("apikey"), **timeouts)

    raise ValueError(
        f"Unknown connection kind for repository {config.name!r}: {sorted(connection)}"
    )


__all__ = [
    "BOOTSTRAP_NAME",
    "BOOTSTRAP_REPOSITORY",
    "is_embedded",
    "is_http",
    "parse_repository_ref",
]

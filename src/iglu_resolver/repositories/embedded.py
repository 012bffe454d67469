"""Embedded repository: schemas bundled as package resources.

Lookups never touch the network and are attempted exactly once. The
repository ``path`` is resolved below a resource root, by default the
``resources`` directory shipped inside :mod:`iglu_resolver`; tests and
embedding applications may point ``root`` at any directory instead::

    <root>/<path>/schemas/<vendor>/<name>/<format>/<version>
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import ClassVar

from iglu_resolver.core.errors import ClientFailure, ParseFailure
from iglu_resolver.core.result import err, ok
from iglu_resolver.core.schema_key import SchemaKey, to_path
from iglu_resolver.core.settings import get_logger

from .base import LookupResult, RepositoryRef
from .config import RepositoryRefConfig

log = get_logger(__name__)


def default_resource_root() -> Traversable:
    """Directory holding the schemas bundled with this package."""
    return files("iglu_resolver") / "resources"


@dataclass(frozen=True)
class EmbeddedRepositoryRef(RepositoryRef):
    """Repository backed by files bundled with the calling code."""

    class_priority: ClassVar[int] = 1
    descriptor: ClassVar[str] = "embedded"

    config: RepositoryRefConfig
    path: str
    root: Traversable | Path | None = field(default=None, compare=False, repr=False)

    def _resource(self, key: SchemaKey) -> Traversable | Path:
        resource = self.root if self.root is not None else default_resource_root()
        for part in to_path(self.path, key).strip("/").split("/"):
            resource = resource / part
        return resource

    def lookup_schema(self, key: SchemaKey) -> LookupResult:
        schema_path = to_path(self.path, key)
        resource = self._resource(key)
        log.debug("Embedded lookup of %s at %s", key, schema_path)

        if not resource.is_file():
            return ok(None)

        try:
            raw = resource.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return err(
                ClientFailure(
                    f"Unknown problem reading {schema_path} in {self.descriptor} "
                    f"Iglu repository {self.name}: {exc}"
                )
            )

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            return err(
                ParseFailure(
                    f"Problem parsing {schema_path} as JSON in {self.descriptor} "
                    f"Iglu repository {self.name}: {exc.msg}"
                )
            )

        if not isinstance(document, dict):
            return err(ParseFailure(f"{schema_path} is not a JSON object"))
        return ok(document)


__all__ = ["EmbeddedRepositoryRef", "default_resource_root"]

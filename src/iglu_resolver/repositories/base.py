"""Common behaviour of all repository backends.

A repository ref knows how to answer exactly one question: *given a schema
key, what are the schema's bytes?* Each variant decides how (read a bundled
resource, call a registry over HTTP, ...) and classifies every failure into a
:class:`~iglu_resolver.core.errors.RegistryError`. Nothing backend-specific is
allowed to escape :meth:`RepositoryRef.lookup_schema`.

Ordering
--------
Refs are ordered by ``(class_priority, instance_priority)``. The class
priority is fixed per variant (cheap local lookups first); the instance
priority comes from the operator's configuration. See
:meth:`iglu_resolver.resolver.Resolver.prioritize`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from iglu_resolver.core.errors import RegistryError
from iglu_resolver.core.result import Err, Ok, Result
from iglu_resolver.core.schema_key import SchemaKey

from .config import RepositoryRefConfig

SchemaDocument = dict[str, Any]
LookupResult = Result[SchemaDocument | None, RegistryError]


class UnsafeLookupError(RuntimeError):
    """A schema that must ship with the package could not be loaded."""


class RepositoryRef(ABC):
    """Interface implemented by every backend variant."""

    #: Repositories with class priority 1 are checked before class priority 2.
    class_priority: ClassVar[int]
    #: Human-readable descriptor of the variant, used in messages.
    descriptor: ClassVar[str]

    config: RepositoryRefConfig

    @abstractmethod
    def lookup_schema(self, key: SchemaKey) -> LookupResult:
        """Return ``Ok(schema)``, ``Ok(None)`` when absent, or ``Err(RegistryError)``."""

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def instance_priority(self) -> int:
        return self.config.instance_priority

    def vendor_matched(self, key: SchemaKey) -> bool:
        """True if any configured vendor prefix is a prefix of ``key.vendor``."""
        return any(key.vendor.startswith(prefix) for prefix in self.config.vendor_prefixes)

    def unsafe_lookup_schema(self, key: SchemaKey) -> SchemaDocument:
        """Return the schema or raise :class:`UnsafeLookupError`.

        Only for schemas the caller guarantees are present (bundled
        meta-schemas); a failure here is a packaging defect.
        """
        result = self.lookup_schema(key)
        if isinstance(result, Ok) and result.value is not None:
            return result.value
        reason = result.error.message if isinstance(result, Err) else "not found"
        raise UnsafeLookupError(
            f"Unsafe lookup of schema {key.to_uri()} in {self.descriptor} "
            f"Iglu repository {self.name} failed: {reason}"
        )

    def __str__(self) -> str:
        return f"{self.descriptor} repository {self.name!r}"


__all__ = ["LookupResult", "RepositoryRef", "SchemaDocument", "UnsafeLookupError"]

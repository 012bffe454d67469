"""Resolver configuration document.

The configuration is itself a self-describing JSON::

    {
      "schema": "iglu:com.snowplowanalytics.iglu/resolver-config/jsonschema/1-0-1",
      "data": {
        "cacheSize": 500,
        "cacheTtl": 600,
        "repositories": [ {descriptor}, ... ]
      }
    }

The envelope's schema is looked up in the bundled repository and the data is
validated against it before any repository is built, so typos surface as one
readable error instead of a half-configured resolver.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from iglu_resolver.core.schema_key import MalformedKey, SchemaCriterion, SchemaKey
from iglu_resolver.repositories import BOOTSTRAP_REPOSITORY, RepositoryRef, parse_repository_ref
from iglu_resolver.validation.validator import JsonSchemaValidator

#: Versions of the configuration schema this package understands.
RESOLVER_CONFIG_CRITERION = SchemaCriterion(
    "com.snowplowanalytics.iglu", "resolver-config", "jsonschema", 1, 0
)


class ResolverConfigError(ValueError):
    """The resolver configuration document is unusable."""


class ResolverConfig(BaseModel):
    """Typed view of the ``data`` part of a resolver configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    cache_size: int = Field(alias="cacheSize", ge=0)
    cache_ttl: int | None = Field(default=None, alias="cacheTtl", ge=0)
    repositories: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def parse(cls, document: Mapping[str, Any]) -> ResolverConfig:
        """Validate a self-describing configuration document and build the model."""
        schema_uri = document.get("schema")
        if not isinstance(schema_uri, str) or "data" not in document:
            raise ResolverConfigError("Resolver configuration must have 'schema' and 'data'")
        try:
            key = SchemaKey.parse(schema_uri)
        except MalformedKey as exc:
            raise ResolverConfigError(str(exc)) from exc
        if not RESOLVER_CONFIG_CRITERION.matches(key):
            raise ResolverConfigError(
                f"Unsupported resolver configuration {key.to_uri()}; "
                f"expected {RESOLVER_CONFIG_CRITERION.as_string()}"
            )

        lookup = BOOTSTRAP_REPOSITORY.lookup_schema(key)
        schema = lookup.unwrap() if lookup.is_ok() else None
        if schema is None:
            raise ResolverConfigError(f"Unknown resolver configuration version {key.to_uri()}")

        violations = JsonSchemaValidator().validate(document["data"], schema)
        if violations:
            raise ResolverConfigError(
                "Invalid resolver configuration: " + "; ".join(violations)
            )
        return cls.model_validate(document["data"])

    def effective_ttl(self, default: int) -> int:
        """TTL in seconds: ``cacheSize: 0`` disables caching, no ``cacheTtl`` uses ``default``."""
        if self.cache_size == 0:
            return 0
        return self.cache_ttl if self.cache_ttl is not None else default

    def repository_refs(self) -> list[RepositoryRef]:
        try:
            return [parse_repository_ref(descriptor) for descriptor in self.repositories]
        except ValueError as exc:
            raise ResolverConfigError(f"Invalid repository descriptor: {exc}") from exc


__all__ = ["RESOLVER_CONFIG_CRITERION", "ResolverConfig", "ResolverConfigError"]

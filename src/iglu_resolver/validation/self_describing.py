"""
Self-describing validation pipeline.

A self-describing JSON carries its own schema key next to its payload::

    {"schema": "iglu:com.acme/event/jsonschema/1-0-0", "data": {"x": "ok"}}

Flow Overview
-------------
1. **Envelope check**: the instance is validated against the bundled
   ``instance-iglu-only`` meta-schema. A violation here means the envelope
   itself is unusable and is reported as
   :class:`~iglu_resolver.core.errors.MalformedEnvelope`.
2. **Split**: ``schema`` is parsed into a
   :class:`~iglu_resolver.core.schema_key.SchemaKey`, ``data`` is kept as is.
3. **Resolve**: the resolver passed by the caller finds the schema; a failure
   is returned as the resolver's ``ResolutionError``.
4. **Validate**: the payload goes to the validator; violations come back as
   ``ValidationError`` with the validator's messages untouched.

On success the caller gets either the payload (``data_only=True``) or the
original envelope.

The envelope check always uses the bundled ``jsonschema`` validator; a
``validator`` passed by the caller is only used for the payload.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from iglu_resolver.core.errors import (
    ClientError,
    MalformedEnvelope,
    SchemaMismatch,
)
from iglu_resolver.core.result import Err, Result, err, ok
from iglu_resolver.core.schema_key import MalformedKey, SchemaCriterion, SchemaKey, SchemaVer
from iglu_resolver.repositories import BOOTSTRAP_REPOSITORY, SchemaDocument

from .validator import DEFAULT_VALIDATOR, SchemaValidator, validate_against_schema

if TYPE_CHECKING:
    from iglu_resolver.resolver import Resolver

#: Key of the meta-schema every self-describing instance must satisfy.
SELF_DESCRIBING_KEY = SchemaKey(
    "com.snowplowanalytics.self-desc",
    "instance-iglu-only",
    "jsonschema",
    SchemaVer(1, 0, 0),
)


@lru_cache(maxsize=1)
def self_describing_schema() -> SchemaDocument:
    """Load the envelope meta-schema from the bundled repository (once per process)."""
    return BOOTSTRAP_REPOSITORY.unsafe_lookup_schema(SELF_DESCRIBING_KEY)


# --------------------------------------------------------------------------- #
# Envelope helpers
# --------------------------------------------------------------------------- #


def validate_as_self_describing(instance: Any) -> Result[Any, ClientError]:
    """Check ``instance`` against the envelope meta-schema."""
    messages = DEFAULT_VALIDATOR.validate(instance, self_describing_schema())
    if messages:
        return err(MalformedEnvelope("; ".join(messages)))
    return ok(instance)


def split_envelope(instance: Any) -> Result[tuple[SchemaKey, Any], ClientError]:
    """Split an envelope into its schema key and payload."""
    if not isinstance(instance, Mapping):
        return err(MalformedEnvelope(f"expected a JSON object, got {type(instance).__name__}"))
    schema_uri = instance.get("schema")
    if not isinstance(schema_uri, str):
        return err(MalformedEnvelope("missing string field 'schema'"))
    if "data" not in instance:
        return err(MalformedEnvelope("missing field 'data'"))
    try:
        key = SchemaKey.parse(schema_uri)
    except MalformedKey as exc:
        return err(MalformedEnvelope(str(exc)))
    return ok((key, instance["data"]))


def _envelope(instance: Any) -> Result[tuple[SchemaKey, Any], ClientError]:
    return validate_as_self_describing(instance).flat_map(split_envelope)


def _resolve_and_validate(
    resolver: Resolver,
    key: SchemaKey,
    data: Any,
    validator: SchemaValidator | None,
) -> Result[Any, ClientError]:
    resolved = resolver.resolve_schema(key)
    if isinstance(resolved, Err):
        return err(resolved.error)
    checked = validate_against_schema(data, resolved.unwrap(), validator)
    if isinstance(checked, Err):
        return err(checked.error)
    return ok(data)


# --------------------------------------------------------------------------- #
# Public entry points
# --------------------------------------------------------------------------- #


def validate(
    instance: Any,
    resolver: Resolver,
    *,
    data_only: bool = False,
    validator: SchemaValidator | None = None,
) -> Result[Any, ClientError]:
    """Validate a self-describing instance against the schema it names.

    Parameters
    ----------
    instance:
        Parsed JSON with ``schema`` and ``data`` fields.
    resolver:
        Resolver used to find the payload's schema.
    data_only:
        Return the payload instead of the full envelope on success.
    validator:
        Optional payload validator; defaults to :class:`JsonSchemaValidator`.
    """
    envelope = _envelope(instance)
    if isinstance(envelope, Err):
        return err(envelope.error)
    key, data = envelope.unwrap()
    return _resolve_and_validate(resolver, key, data, validator).map(
        lambda payload: payload if data_only else instance
    )


def validate_and_identify_schema(
    instance: Any,
    resolver: Resolver,
    *,
    data_only: bool = False,
    validator: SchemaValidator | None = None,
) -> Result[tuple[SchemaKey, Any], ClientError]:
    """Same as :func:`validate`, also returning the key the instance was validated with."""
    envelope = _envelope(instance)
    if isinstance(envelope, Err):
        return err(envelope.error)
    key, data = envelope.unwrap()
    return _resolve_and_validate(resolver, key, data, validator).map(
        lambda payload: (key, payload if data_only else instance)
    )


def verify_schema_and_validate(
    instance: Any,
    criterion: SchemaCriterion,
    resolver: Resolver,
    *,
    data_only: bool = False,
    validator: SchemaValidator | None = None,
) -> Result[Any, ClientError]:
    """Validate only if the instance's key satisfies ``criterion``.

    A mismatch is reported before the resolver or the validator is touched.
    """
    envelope = _envelope(instance)
    if isinstance(envelope, Err):
        return err(envelope.error)
    key, data = envelope.unwrap()
    if not criterion.matches(key):
        return err(SchemaMismatch(criterion, key))
    return _resolve_and_validate(resolver, key, data, validator).map(
        lambda payload: payload if data_only else instance
    )


__all__ = [
    "SELF_DESCRIBING_KEY",
    "self_describing_schema",
    "split_envelope",
    "validate",
    "validate_and_identify_schema",
    "validate_as_self_describing",
    "verify_schema_and_validate",
]

"""Adapter around the external JSON-Schema validator (``jsonschema``).

The resolver only needs one capability from a validator: given a draft-4
compatible schema document and an instance, report zero or more violation
strings. :class:`SchemaValidator` captures that contract so tests can count
calls or stub results; :class:`JsonSchemaValidator` is the real thing.

Violation format
----------------
``"<json-pointer>: <message>"`` where the pointer is relative to the validated
instance, e.g. ``"/x: 1 is not of type 'string'"``. The root is ``"/"``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as JsonSchemaViolation
from referencing import Registry, Resource
from referencing.exceptions import NoSuchResource, Unresolvable

from iglu_resolver.core.errors import ValidationError
from iglu_resolver.core.result import Result, err, ok


class SchemaValidator(Protocol):
    """Anything that can check an instance against a schema document."""

    def validate(self, instance: Any, schema: Mapping[str, Any]) -> list[str]:
        """Return violation messages; an empty list means valid."""
        ...


def _pointer(path: Iterable[str | int]) -> str:
    escaped = [str(part).replace("~", "~0").replace("/", "~1") for part in path]
    return "/" + "/".join(escaped)


def _no_remote_retrieval(uri: str) -> Resource[Any]:
    # Schemas come from Iglu repositories; "$ref" is never followed over the network.
    raise NoSuchResource(ref=uri)


#: Reference registry for every compiled schema. The draft meta-schemas are
#: still resolvable because jsonschema combines them into any registry.
OFFLINE_REGISTRY: Registry[Any] = Registry(retrieve=_no_remote_retrieval)


class JsonSchemaValidator:
    """Draft-4 validation backed by :mod:`jsonschema`.

    Only references inside the schema document itself can be resolved; an
    external ``$ref`` is reported as a violation instead of being fetched.
    """

    def compile(self, schema: Mapping[str, Any]) -> Result[Draft4Validator, list[str]]:
        """Check ``schema`` against the draft-4 meta-schema and build a validator."""
        try:
            Draft4Validator.check_schema(schema)
        except SchemaError as exc:
            return err([f"Invalid schema at {_pointer(exc.absolute_path)}: {exc.message}"])
        return ok(Draft4Validator(schema, registry=OFFLINE_REGISTRY))

    def validate(self, instance: Any, schema: Mapping[str, Any]) -> list[str]:
        compiled = self.compile(schema)
        if compiled.is_err():
            return compiled.unwrap_err()

        def order(violation: JsonSchemaViolation) -> tuple[str, str]:
            return (_pointer(violation.absolute_path), violation.message)

        try:
            violations = sorted(compiled.unwrap().iter_errors(instance), key=order)
        except Unresolvable as exc:
            return [f"Invalid schema: {exc}"]
        return [f"{_pointer(v.absolute_path)}: {v.message}" for v in violations]


#: Shared default; ``JsonSchemaValidator`` holds no state.
DEFAULT_VALIDATOR = JsonSchemaValidator()


def validate_against_schema(
    instance: Any,
    schema: Mapping[str, Any],
    validator: SchemaValidator | None = None,
) -> Result[Any, ValidationError]:
    """Validate ``instance`` against an explicit ``schema``.

    Returns ``Ok(instance)`` when valid, otherwise ``Err(ValidationError)``
    carrying every violation reported by the validator.
    """
    messages = (validator or DEFAULT_VALIDATOR).validate(instance, schema)
    if messages:
        return err(ValidationError(tuple(messages)))
    return ok(instance)


__all__ = [
    "DEFAULT_VALIDATOR",
    "JsonSchemaValidator",
    "SchemaValidator",
    "validate_against_schema",
]

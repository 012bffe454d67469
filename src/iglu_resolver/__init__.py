"""iglu-resolver: resolve and validate JSON schemas addressed by Iglu keys.

Typical use::

    from iglu_resolver import Resolver, SchemaKey, validate

    resolver = Resolver.from_file("resolver.json")
    schema = resolver.resolve_schema(SchemaKey.parse("iglu:com.acme/event/jsonschema/1-0-0"))
    result = validate(instance, resolver, data_only=True)
"""

from __future__ import annotations

from iglu_resolver.core.errors import (
    ClientError,
    MalformedEnvelope,
    ResolutionError,
    SchemaMismatch,
    ValidationError,
)
from iglu_resolver.core.result import Err, Ok, Result
from iglu_resolver.core.schema_key import MalformedKey, SchemaCriterion, SchemaKey, SchemaVer
from iglu_resolver.resolver import Resolver
from iglu_resolver.validation import (
    validate,
    validate_against_schema,
    validate_and_identify_schema,
    verify_schema_and_validate,
)

__version__ = "0.1.0"

__all__ = [
    "ClientError",
    "Err",
    "MalformedEnvelope",
    "MalformedKey",
    "Ok",
    "ResolutionError",
    "Resolver",
    "Result",
    "SchemaCriterion",
    "SchemaKey",
    "SchemaMismatch",
    "SchemaVer",
    "ValidationError",
    "__version__",
    "validate",
    "validate_against_schema",
    "validate_and_identify_schema",
    "verify_schema_and_validate",
]
